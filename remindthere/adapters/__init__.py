"""
Adapters for RemindMeThere hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteKVStore, MemoryKVStore, KVReminderStore, KVLocationPinStore
from .homeassistant.client import HAClient
from .position import HAPositionSource, StaticPositionSource
from .notify import HANotificationSink, MqttNotificationSink, LogNotificationSink

__all__ = [
    "SQLiteKVStore", "MemoryKVStore", "KVReminderStore", "KVLocationPinStore",
    "HAClient", "HAPositionSource", "StaticPositionSource",
    "HANotificationSink", "MqttNotificationSink", "LogNotificationSink",
]
