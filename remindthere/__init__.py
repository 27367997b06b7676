"""
RemindMeThere: location- and time-window based reminders.

Notifies the user when they are inside a reminder's geofence while
its time window is open.
"""

__version__ = "0.1.0"
