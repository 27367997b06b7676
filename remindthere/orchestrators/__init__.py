"""
Orchestrators for RemindMeThere.

The scheduling driver wires the position source, the reminder store
and the geofence engine into a periodic evaluation loop.
"""

from .scheduler import SchedulingDriver

__all__ = ["SchedulingDriver"]
