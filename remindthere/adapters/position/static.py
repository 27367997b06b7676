"""
Static / manually driven position source.

Reports a fixed coordinate until update() pushes a new one; every
active subscriber receives pushed updates immediately.
"""

from typing import List, Optional
from remindthere.adapters.position.polling import emit, moved_enough
from remindthere.common.geo import now_ms
from remindthere.core.errors import TransientIOError
from remindthere.core.models import Position
from remindthere.observability import metrics
from remindthere.ports.position import PositionCallback, Unsubscribe

class StaticPositionSource:
    """고정 좌표 위치 소스"""

    def __init__(self, position: Optional[Position] = None):
        self._position = position
        self._subscribers: List[tuple] = []

    async def get_current(self) -> Position:
        if self._position is None:
            raise TransientIOError("no position configured")
        return self._position

    async def watch(self,
                    callback: PositionCallback,
                    *,
                    min_interval_ms: int = 5000,
                    min_distance_m: float = 5.0) -> Unsubscribe:
        entry = [callback, min_distance_m, None]
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    async def update(self, latitude: float, longitude: float) -> Position:
        """새 좌표를 설정하고 구독자에게 전달합니다."""
        position = Position(latitude=latitude, longitude=longitude, timestamp_ms=now_ms())
        self._position = position
        metrics.position_updates.labels(source="static").inc()
        for entry in list(self._subscribers):
            callback, min_distance_m, last = entry
            if moved_enough(last, position, min_distance_m):
                entry[2] = position
                await emit(callback, position)
        return position
