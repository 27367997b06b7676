"""
Home Assistant notify service sink.

Delivers reminder notifications as mobile app push notifications
through the Home Assistant notify.<service> call.
"""

import aiohttp
from typing import Optional
from remindthere.adapters.homeassistant.client import HAClient
from remindthere.core.errors import DeliveryError
from remindthere.core.models import Notification
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.notify.ha")

class HANotificationSink:
    """Home Assistant notify 서비스 기반 알림 발송"""

    def __init__(self, ha: HAClient, service: Optional[str] = None, *, critical: bool = False):
        """
        초기화합니다.

        Args:
            ha: Home Assistant 클라이언트 (세션이 열려 있어야 함)
            service: notify 서비스 이름 (None이면 첫 번째 mobile_app 서비스 사용)
            critical: iOS critical 알림 여부
        """
        self.ha = ha
        self.service = service
        self.critical = critical

    async def _resolve_service(self) -> str:
        if self.service:
            return self.service
        services = await self.ha.list_notify_mobile_services()
        if not services:
            raise DeliveryError("no mobile_app notify service available")
        self.service = services[0]
        log.info(f"notify 서비스 자동 선택: {self.service}")
        return self.service

    async def deliver(self, notification: Notification) -> None:
        service = await self._resolve_service()
        data = {"tag": f"reminder-{notification.reminder_id}"} if notification.reminder_id else {}
        if self.critical:
            data["push"] = {"sound": {"name": "default", "critical": 1, "volume": 1}}
        try:
            await self.ha.notify(service, notification.title, notification.body, data=data or None)
        except (aiohttp.ClientError, TimeoutError, RuntimeError) as e:
            raise DeliveryError(f"notify/{service} failed: {e}") from e
