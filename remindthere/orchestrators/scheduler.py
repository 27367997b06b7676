"""
Scheduling driver for RemindMeThere.

This module runs the geofence engine on a fixed cadence. Position
updates only overwrite the last known position; evaluation is driven
solely by the timer, and at most one tick runs at a time. Each tick
re-reads the position source first and is skipped while the source is
unavailable.
"""

import asyncio
import time
from typing import Optional

from remindthere.core.engine import GeofenceEngine
from remindthere.core.errors import TransientIOError
from remindthere.core.models import Position, TickReport
from remindthere.observability import metrics
from remindthere.observability.logging_setup import get_logger
from remindthere.ports.position import PositionSourcePort, Unsubscribe
from remindthere.ports.reminder_store import ReminderStorePort

log = get_logger("remindthere.scheduler")

class SchedulingDriver:
    """주기적 지오펜스 평가 드라이버"""

    def __init__(self,
                 engine: GeofenceEngine,
                 store: ReminderStorePort,
                 positions: PositionSourcePort,
                 *,
                 interval_sec: float = 10.0,
                 tick_timeout_sec: Optional[float] = 5.0,
                 min_interval_ms: int = 5000,
                 min_distance_m: float = 5.0):
        """
        초기화합니다.

        Args:
            engine: 지오펜스 평가 엔진
            store: 리마인더 저장소 포트
            positions: 위치 소스 포트
            interval_sec: 틱 주기 (초)
            tick_timeout_sec: 틱 최대 실행 시간 (초), None이면 제한 없음
            min_interval_ms: 위치 구독 최소 갱신 간격
            min_distance_m: 위치 구독 최소 이동 거리
        """
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self.engine = engine
        self.store = store
        self.positions = positions
        self.interval_sec = interval_sec
        self.tick_timeout_sec = tick_timeout_sec
        self.min_interval_ms = min_interval_ms
        self.min_distance_m = min_distance_m

        self.position: Optional[Position] = None
        self.last_report: Optional[TickReport] = None
        self.start_time = time.time()

        self._tick_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def has_position(self) -> bool:
        return self.position is not None

    def on_position(self, position: Position) -> None:
        """새 위치로 덮어씁니다. 평가는 트리거하지 않습니다."""
        self.position = position
        log.debug("위치 갱신", lat=position.latitude, lon=position.longitude)

    async def start(self) -> None:
        """
        초기 위치를 조회하고, 위치 구독과 주기 태스크를 시작합니다.
        """
        if self.running:
            return

        try:
            self.on_position(await self.positions.get_current())
        except TransientIOError as e:
            # 구독으로 위치가 들어오면 그때부터 평가
            log.warning("초기 위치 조회 실패", error=str(e))

        self._unsubscribe = await self.positions.watch(
            self.on_position,
            min_interval_ms=self.min_interval_ms,
            min_distance_m=self.min_distance_m,
        )
        self._task = asyncio.create_task(self._loop())
        log.info(f"스케줄러 시작됨 interval:{self.interval_sec}s")

    async def stop(self) -> None:
        """위치 구독을 해제하고 주기 태스크를 취소합니다."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("스케줄러 중지됨")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_sec)
            metrics.uptime_seconds.set(time.time() - self.start_time)
            try:
                await self.run_once()
            except Exception as e:
                # 루프는 계속 살아 있어야 함
                log.error("틱 실행 중 예기치 않은 오류", error=str(e))

    async def run_once(self, now_ms: Optional[int] = None) -> Optional[TickReport]:
        """
        틱을 한 번 실행합니다.

        Returns:
            틱 요약, 건너뛴 경우 None
        """
        if self._tick_lock.locked():
            metrics.ticks_skipped.labels(reason="overlap").inc()
            log.warning("이전 틱이 아직 실행 중이라 건너뜀")
            return None

        async with self._tick_lock:
            try:
                self.on_position(await self.positions.get_current())
            except TransientIOError as e:
                # 마지막 위치가 있어도 오래된 값으로 평가하지 않음
                reason = "no_position" if self.position is None else "position_unavailable"
                metrics.ticks_skipped.labels(reason=reason).inc()
                log.warning("위치 소스를 사용할 수 없어 틱 건너뜀", reason=reason, error=str(e))
                return None
            position = self.position

            try:
                reminders = await self.store.get_all()
            except Exception as e:
                # 부분 평가 없이 다음 틱에 재시도
                metrics.ticks_skipped.labels(reason="store_unavailable").inc()
                log.warning("리마인더 저장소 조회 실패, 틱 건너뜀", error=str(e))
                return None

            t0 = time.perf_counter()
            try:
                if self.tick_timeout_sec:
                    report = await asyncio.wait_for(
                        self.engine.tick(position, reminders, now_ms),
                        timeout=self.tick_timeout_sec,
                    )
                else:
                    report = await self.engine.tick(position, reminders, now_ms)
            except asyncio.TimeoutError:
                metrics.ticks_skipped.labels(reason="timeout").inc()
                log.error(f"틱 시간 초과 ({self.tick_timeout_sec}s), 중단됨")
                return None
            finally:
                metrics.tick_seconds.observe(time.perf_counter() - t0)

        metrics.ticks_total.inc()
        self.last_report = report
        if report.fired or report.entered or report.exited:
            log.info("틱 완료",
                     evaluated=report.evaluated,
                     entered=len(report.entered),
                     exited=len(report.exited),
                     fired=len(report.fired))
        return report
