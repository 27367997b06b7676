"""
Notification sink adapters.
"""

from .homeassistant import HANotificationSink
from .mqtt import MqttNotificationSink
from .log import LogNotificationSink

__all__ = ["HANotificationSink", "MqttNotificationSink", "LogNotificationSink"]
