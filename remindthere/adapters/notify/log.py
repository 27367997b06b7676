"""
Dry-run notification sink that only logs.
"""

from typing import List
from remindthere.core.models import Notification
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.notify.log")

class LogNotificationSink:
    """로그 출력 전용 알림 발송 (dry run)"""

    def __init__(self):
        self.delivered: List[Notification] = []

    async def deliver(self, notification: Notification) -> None:
        self.delivered.append(notification)
        log.info("[DRY RUN] 알림", reminder_id=notification.reminder_id,
                 title=notification.title, body=notification.body)
