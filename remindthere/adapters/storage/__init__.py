"""
Storage adapters for RemindMeThere hexagonal architecture.

This module contains the key-value store implementations and the
reminder / location pin stores built on top of them.
"""

from .sqlite_kv import SQLiteKVStore
from .memory_kv import MemoryKVStore
from .reminder_store import KVReminderStore, KVLocationPinStore

__all__ = ["SQLiteKVStore", "MemoryKVStore", "KVReminderStore", "KVLocationPinStore"]
