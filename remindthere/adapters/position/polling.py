"""
Polling subscription for position sources.

Turns a one-shot get_current() into a watch() subscription that
emits when the device moved at least min_distance_m, checking at
most every min_interval_ms.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from typing import Optional
from remindthere.common.geo import distance_meters
from remindthere.core.errors import TransientIOError
from remindthere.core.models import Position
from remindthere.observability import metrics
from remindthere.observability.logging_setup import get_logger
from remindthere.ports.position import PositionCallback, Unsubscribe

log = get_logger("remindthere.position")

async def emit(callback: PositionCallback, position: Position) -> None:
    """동기/비동기 콜백 모두 지원"""
    result = callback(position)
    if inspect.isawaitable(result):
        await result

def moved_enough(last: Optional[Position], new: Position, min_distance_m: float) -> bool:
    if last is None:
        return True
    return distance_meters(last.latitude, last.longitude,
                           new.latitude, new.longitude) >= min_distance_m

class PollingPositionSource(ABC):
    """get_current()을 주기적으로 호출하는 위치 소스 기반 클래스"""

    source_name = "polling"

    @abstractmethod
    async def get_current(self) -> Position:
        """
        현재 위치를 한 번 조회합니다.

        Raises:
            TransientIOError: 위치를 가져올 수 없는 경우
        """

    async def watch(self,
                    callback: PositionCallback,
                    *,
                    min_interval_ms: int = 5000,
                    min_distance_m: float = 5.0) -> Unsubscribe:
        """
        위치 변화를 구독합니다.

        Returns:
            구독 해제 함수 (폴링 태스크 취소)
        """
        task = asyncio.create_task(
            self._poll(callback, min_interval_ms / 1000.0, min_distance_m)
        )

        def unsubscribe() -> None:
            if not task.done():
                task.cancel()

        return unsubscribe

    async def _poll(self, callback: PositionCallback, interval_sec: float, min_distance_m: float) -> None:
        last: Optional[Position] = None
        while True:
            try:
                position = await self.get_current()
                if moved_enough(last, position, min_distance_m):
                    last = position
                    metrics.position_updates.labels(source=self.source_name).inc()
                    await emit(callback, position)
            except TransientIOError as e:
                log.warning("위치 조회 실패, 다음 주기에 재시도", error=str(e))
            except Exception as e:
                log.error("위치 콜백 처리 오류", error=str(e))
            await asyncio.sleep(interval_sec)
