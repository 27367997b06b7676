"""
Metrics definitions for RemindMeThere.

This module defines Prometheus metrics for monitoring
the geofence evaluation loop.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
ticks_total = Counter(
    "geofence_ticks_total",
    "Number of evaluation ticks that ran to completion"
)

ticks_skipped = Counter(
    "geofence_ticks_skipped_total",
    "Number of evaluation ticks skipped",
    ["reason"]
)

notifications_fired = Counter(
    "reminder_notifications_fired_total",
    "Number of reminder notifications delivered"
)

delivery_failures = Counter(
    "reminder_delivery_failures_total",
    "Number of reminder notifications the sink failed to deliver"
)

invalid_reminders = Counter(
    "reminder_invalid_total",
    "Number of malformed reminder records skipped",
    ["stage"]
)

transitions = Counter(
    "geofence_transitions_total",
    "Number of enter/exit transitions observed",
    ["direction"]
)

position_updates = Counter(
    "position_updates_total",
    "Number of position updates received",
    ["source"]
)

# 히스토그램 메트릭
tick_seconds = Histogram(
    "geofence_tick_duration_seconds",
    "Time spent evaluating one tick",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# 게이지 메트릭
active_reminders = Gauge(
    "reminder_active",
    "Number of non-completed reminders seen in the last tick"
)

inside_reminders = Gauge(
    "geofence_inside",
    "Number of reminders whose zone the user is currently inside"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
