"""
Notification sink port interface.

This module defines the protocol for delivering a reminder notification.
"""

from typing import Protocol
from remindthere.core.models import Notification

class NotificationSinkPort(Protocol):
    """알림 발송 포트 인터페이스"""
    
    async def deliver(self, notification: Notification) -> None:
        """
        알림을 발송합니다.
        
        Args:
            notification: 알림 내용
            
        Raises:
            DeliveryError: 발송 실패
        """
        ...
