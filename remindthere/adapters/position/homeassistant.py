"""
Home Assistant device tracker position source.
"""

import aiohttp
from remindthere.adapters.homeassistant.client import HAClient
from remindthere.adapters.position.polling import PollingPositionSource
from remindthere.common.geo import now_ms
from remindthere.core.errors import TransientIOError
from remindthere.core.models import Position

class HAPositionSource(PollingPositionSource):
    """Home Assistant device_tracker 엔티티 기반 위치 소스"""

    source_name = "homeassistant"

    def __init__(self, ha: HAClient, entity_id: str):
        """
        초기화합니다.

        Args:
            ha: Home Assistant 클라이언트 (세션이 열려 있어야 함)
            entity_id: 추적할 엔티티 (예: "device_tracker.phone")
        """
        self.ha = ha
        self.entity_id = entity_id

    async def get_current(self) -> Position:
        try:
            location = await self.ha.get_device_location(self.entity_id)
        except (aiohttp.ClientError, TimeoutError, RuntimeError) as e:
            raise TransientIOError(f"device location unavailable: {e}") from e
        if location is None:
            raise TransientIOError(f"{self.entity_id} has no coordinates")
        return Position(
            latitude=location["latitude"],
            longitude=location["longitude"],
            accuracy_m=location.get("gps_accuracy"),
            timestamp_ms=now_ms(),
        )
