"""
Notification message templates for RemindMeThere.

This module turns a reminder into the notification payload
handed to the notification sink.
"""

from typing import Optional
from remindthere.core.models import DEFAULT_BODY, Notification, Reminder

TITLE_TEMPLATE = "Reminder: {title}"

def create_notification(reminder: Reminder, *, title_template: Optional[str] = None) -> Notification:
    """
    리마인더에서 알림 내용을 생성합니다.

    Args:
        reminder: 리마인더
        title_template: 제목 템플릿 ({title}, {location} 사용 가능)

    Returns:
        알림 내용. 설명이 없으면 기본 문구를 본문으로 사용합니다.
    """
    template = title_template or TITLE_TEMPLATE
    title = template.format(title=reminder.title, location=reminder.location_name or "")
    body = reminder.description if reminder.description is not None else DEFAULT_BODY
    return Notification(title=title, body=body, reminder_id=reminder.id)
