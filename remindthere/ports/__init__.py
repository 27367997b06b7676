"""
Port interfaces for RemindMeThere hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the geofence engine and external adapters.
"""

from .kvstore import KVStorePort
from .reminder_store import ReminderStorePort, LocationPinStorePort
from .position import PositionSourcePort, PositionCallback, Unsubscribe
from .notify import NotificationSinkPort

__all__ = [
    "KVStorePort",
    "ReminderStorePort",
    "LocationPinStorePort",
    "PositionSourcePort",
    "PositionCallback",
    "Unsubscribe",
    "NotificationSinkPort",
]
