"""
Geofence evaluation engine for RemindMeThere.

On each tick the engine combines the latest position, the active
reminders, the transition tracker and the notification throttle to
decide which reminders fire, then updates the tracked state.

The engine is the sole owner and mutator of its TransitionState and
ThrottleState. Callers must not run two ticks of the same engine
concurrently; the scheduling driver enforces that.
"""

import math
from typing import Callable, Dict, Iterable, List, Optional

from remindthere.common.geo import distance_meters, now_ms as wall_clock_ms, validate_coordinates
from remindthere.core.errors import InvalidReminderError
from remindthere.core.message_template import create_notification
from remindthere.core.models import GeofenceDecision, Position, Reminder, TickReport
from remindthere.core.state import ThrottleState, TransitionState, stale_ids
from remindthere.observability import metrics
from remindthere.observability.logging_setup import get_logger
from remindthere.ports.notify import NotificationSinkPort

log = get_logger("remindthere.engine")

DEFAULT_MIN_RENOTIFY_INTERVAL_MS = 2 * 60 * 1000

def is_window_active(reminder: Reminder, now_ms: int) -> bool:
    """시간 창 활성 여부 (양 끝 포함)"""
    return reminder.start_ms <= now_ms <= reminder.end_ms

def _check_reminder(reminder: Reminder) -> None:
    """
    평가 전 방어적 검증. 저장소 경계에서 이미 검증되지만
    검증을 우회해 생성된 레코드가 틱 전체를 망가뜨리지 않도록 합니다.
    """
    rid = getattr(reminder, "id", None) or "<unknown>"
    try:
        lat, lon = float(reminder.latitude), float(reminder.longitude)
        radius = float(reminder.radius_m)
        start, end = reminder.start_ms, reminder.end_ms
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidReminderError(rid, f"missing or malformed field: {e}") from e

    if not validate_coordinates(lat, lon):
        raise InvalidReminderError(rid, f"coordinates out of range ({lat}, {lon})")
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidReminderError(rid, f"radius must be positive, got {radius}")
    if end < start:
        raise InvalidReminderError(rid, "window ends before it starts")

def decide(reminder: Reminder,
           position: Position,
           now_ms: int,
           was_inside: bool,
           last_notified: Optional[int],
           *,
           min_renotify_interval_ms: int = DEFAULT_MIN_RENOTIFY_INTERVAL_MS) -> GeofenceDecision:
    """
    리마인더 하나에 대한 순수 판단 (상태를 읽거나 바꾸지 않음).

    Args:
        reminder: 평가할 리마인더
        position: 현재 위치
        now_ms: 평가 시각 (epoch ms)
        was_inside: 이전 틱의 영역 내부 여부
        last_notified: 마지막 알림 시각, 없으면 None
        min_renotify_interval_ms: 재알림 최소 간격

    Raises:
        InvalidReminderError: 레코드를 평가할 수 없는 경우
    """
    _check_reminder(reminder)

    distance = distance_meters(position.latitude, position.longitude,
                               reminder.latitude, reminder.longitude)
    in_radius = distance < reminder.radius_m
    in_window = is_window_active(reminder, now_ms)
    is_inside = in_radius and in_window

    if is_inside and not was_inside:
        transition = "enter"
        notify = last_notified is None or now_ms - last_notified >= min_renotify_interval_ms
        reason = "entered" if notify else "entered_within_throttle"
    elif not is_inside and was_inside:
        transition = "exit"
        notify = False
        reason = "left_radius" if in_window else "window_closed"
    else:
        transition = "none"
        notify = False
        reason = "inside" if is_inside else "outside"

    return GeofenceDecision(
        reminder_id=reminder.id,
        is_inside=is_inside,
        was_inside=was_inside,
        transition=transition,
        notify=notify,
        distance_m=distance,
        reason=reason,
    )

class GeofenceEngine:
    """지오펜스 리마인더 평가 엔진"""

    def __init__(self,
                 sink: NotificationSinkPort,
                 *,
                 min_renotify_interval_ms: int = DEFAULT_MIN_RENOTIFY_INTERVAL_MS,
                 transitions: Optional[TransitionState] = None,
                 throttle: Optional[ThrottleState] = None,
                 clock: Optional[Callable[[], int]] = None,
                 title_template: Optional[str] = None):
        """
        초기화합니다.

        Args:
            sink: 알림 발송 포트
            min_renotify_interval_ms: 같은 리마인더의 재알림 최소 간격 (밀리초)
            transitions: 초기 진입 상태 (없으면 빈 상태)
            throttle: 초기 스로틀 상태 (주어지면 그 간격을 사용)
            clock: 현재 epoch ms를 반환하는 함수
            title_template: 알림 제목 템플릿
        """
        self.sink = sink
        self.transitions = transitions if transitions is not None else TransitionState()
        self.throttle = throttle if throttle is not None else ThrottleState(min_renotify_interval_ms)
        self.clock = clock or wall_clock_ms
        self.title_template = title_template

    @property
    def min_renotify_interval_ms(self) -> int:
        return self.throttle.min_interval_ms

    def decide(self, reminder: Reminder, position: Position, now_ms: int) -> GeofenceDecision:
        """현재 추적 상태 기준으로 판단합니다 (상태 변경 없음)."""
        return decide(
            reminder, position, now_ms,
            self.transitions.was_inside(reminder.id),
            self.throttle.last_notified(reminder.id),
            min_renotify_interval_ms=self.throttle.min_interval_ms,
        )

    def evaluate(self,
                 position: Position,
                 reminders: Iterable[Reminder],
                 now_ms: int) -> List[GeofenceDecision]:
        """
        미완료 리마인더 전체에 대한 판단 목록 (드라이런, 상태 변경 없음).
        평가할 수 없는 레코드는 제외됩니다.
        """
        decisions: List[GeofenceDecision] = []
        for reminder in reminders:
            if reminder is None or getattr(reminder, "completed", False):
                continue
            if not getattr(reminder, "id", None):
                continue
            try:
                decisions.append(self.decide(reminder, position, now_ms))
            except InvalidReminderError as e:
                log.debug("리마인더 평가 제외", reminder_id=e.reminder_id, reason=e.reason)
        return decisions

    async def tick(self,
                   position: Position,
                   reminders: Iterable[Reminder],
                   now_ms: Optional[int] = None) -> TickReport:
        """
        활성 리마인더 전체를 한 번 평가합니다.

        Args:
            position: 현재 위치
            reminders: 저장소의 리마인더 스냅샷 (완료 항목 포함 가능)
            now_ms: 평가 시각 (없으면 clock 사용)

        Returns:
            틱 실행 요약
        """
        now = self.clock() if now_ms is None else now_ms
        report = TickReport(now_ms=now)
        active: Dict[str, Reminder] = {}

        for reminder in reminders:
            if reminder is None or getattr(reminder, "completed", False):
                continue
            rid = getattr(reminder, "id", None)
            if not rid:
                report.skipped_invalid.append("<unknown>")
                metrics.invalid_reminders.labels(stage="engine").inc()
                log.warning("ID 없는 리마인더 건너뜀")
                continue
            active[rid] = reminder

        for reminder in active.values():
            try:
                decision = self.decide(reminder, position, now)
            except InvalidReminderError as e:
                report.skipped_invalid.append(e.reminder_id)
                metrics.invalid_reminders.labels(stage="engine").inc()
                log.warning("리마인더 평가 건너뜀", reminder_id=e.reminder_id, reason=e.reason)
                continue

            report.evaluated += 1
            await self._apply(reminder, decision, now, report)

        # 완료되었거나 사라진 리마인더의 상태 정리
        for rid in stale_ids(active.keys(), self.transitions, self.throttle):
            self.forget(rid)
            report.purged.append(rid)

        metrics.active_reminders.set(len(active))
        metrics.inside_reminders.set(self.transitions.inside_count())
        return report

    async def _apply(self, reminder: Reminder, decision: GeofenceDecision,
                     now: int, report: TickReport) -> None:
        """판단 결과를 상태에 반영하고 필요하면 알림을 발송합니다."""
        if decision.transition == "enter":
            self.transitions.mark(reminder.id, True)
            report.entered.append(reminder.id)
            metrics.transitions.labels(direction="enter").inc()
            log.info("리마인더 영역 진입",
                     reminder_id=reminder.id,
                     distance_m=round(decision.distance_m, 1))

            if not decision.notify:
                report.throttled.append(reminder.id)
                log.debug("재알림 간격 미경과, 알림 생략",
                          reminder_id=reminder.id,
                          last_notified=self.throttle.last_notified(reminder.id))
                return

            if await self._deliver(reminder):
                # 발송 성공 시에만 스로틀 시각 갱신
                self.throttle.record(reminder.id, now)
                report.fired.append(reminder.id)
            else:
                report.delivery_failures.append(reminder.id)

        elif decision.transition == "exit":
            # 스로틀 시각은 유지
            self.transitions.mark(reminder.id, False)
            report.exited.append(reminder.id)
            metrics.transitions.labels(direction="exit").inc()
            log.info("리마인더 영역 이탈", reminder_id=reminder.id, reason=decision.reason)

    async def _deliver(self, reminder: Reminder) -> bool:
        try:
            notification = create_notification(reminder, title_template=self.title_template)
            await self.sink.deliver(notification)
        except Exception as e:
            metrics.delivery_failures.inc()
            log.error("알림 발송 실패", reminder_id=reminder.id, error=str(e))
            return False
        metrics.notifications_fired.inc()
        log.info("알림 발송됨", reminder_id=reminder.id, title=notification.title)
        return True

    def forget(self, reminder_id: str) -> None:
        """리마인더의 진입/스로틀 상태를 즉시 제거합니다."""
        removed = self.transitions.discard(reminder_id)
        removed = self.throttle.discard(reminder_id) or removed
        if removed:
            log.debug("리마인더 상태 제거", reminder_id=reminder_id)

    def snapshot(self) -> dict:
        """진단용 상태 사본"""
        return {
            "inside": self.transitions.as_dict(),
            "last_notified": self.throttle.as_dict(),
            "min_renotify_interval_ms": self.min_renotify_interval_ms,
        }
