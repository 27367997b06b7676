"""
Reminder authoring feature for RemindMeThere.

This module covers what the reminder form and list screens do:
create a reminder from a saved location pin, list reminders with
incomplete ones first, toggle completion, delete, and manage the
location pins used as the picker.
"""

from datetime import datetime
from typing import Callable, List, Optional
from pydantic import ValidationError

from remindthere.common.geo import ensure_aware, now_ms as wall_clock_ms
from remindthere.core.engine import GeofenceEngine
from remindthere.core.errors import ValidationFailed
from remindthere.core.models import DEFAULT_RADIUS_M, LocationPin, Reminder
from remindthere.observability.logging_setup import get_logger
from remindthere.ports.position import PositionSourcePort
from remindthere.ports.reminder_store import LocationPinStorePort, ReminderStorePort

log = get_logger("remindthere.authoring")

class ReminderAuthoring:
    """리마인더 작성/관리"""

    def __init__(self,
                 store: ReminderStorePort,
                 pins: LocationPinStorePort,
                 *,
                 engine: Optional[GeofenceEngine] = None,
                 clock: Optional[Callable[[], int]] = None,
                 default_radius_m: float = DEFAULT_RADIUS_M):
        """
        초기화합니다.

        Args:
            store: 리마인더 저장소
            pins: 위치 핀 저장소
            engine: 완료/삭제 시 상태를 즉시 정리할 엔진 (선택)
            clock: 현재 epoch ms 함수 (ID 생성용)
            default_radius_m: 새 리마인더의 트리거 반경
        """
        self.store = store
        self.pins = pins
        self.engine = engine
        self.clock = clock or wall_clock_ms
        self.default_radius_m = default_radius_m
        self._last_id = 0

    def _next_id(self) -> str:
        # 밀리초 타임스탬프 ID, 같은 밀리초 내 중복 방지
        candidate = max(self.clock(), self._last_id + 1)
        self._last_id = candidate
        return str(candidate)

    async def find_pin(self, name: str) -> Optional[LocationPin]:
        for pin in await self.pins.get_all():
            if pin.name == name:
                return pin
        return None

    async def create(self,
                     title: str,
                     pin_name: str,
                     start: datetime,
                     end: datetime,
                     description: Optional[str] = None) -> Reminder:
        """
        폼 제출로 리마인더를 생성합니다.

        생성 시 즉시 알림은 보내지 않습니다. 이미 영역 안에 있다면 다음 틱의
        진입 판단이 알림을 발송하므로, 여기서 보내면 중복 알림이 됩니다.

        Raises:
            ValidationFailed: 제목/위치 누락, 종료 시각이 시작 이후가 아님
        """
        if not title or not title.strip() or not pin_name:
            raise ValidationFailed("Title and location required")
        if ensure_aware(end) <= ensure_aware(start):
            raise ValidationFailed("End time must be after start time")

        pin = await self.find_pin(pin_name)
        if pin is None:
            raise ValidationFailed(f"Unknown location: {pin_name}")

        try:
            reminder = Reminder(
                id=self._next_id(),
                title=title,
                description=description,
                latitude=pin.latitude,
                longitude=pin.longitude,
                location_name=pin.name,
                radius_m=self.default_radius_m,
                start_time=start,
                end_time=end,
                completed=False,
            )
        except ValidationError as e:
            raise ValidationFailed(str(e)) from e

        await self.store.upsert(reminder)
        log.info("리마인더 생성됨", reminder_id=reminder.id, location=pin.name)
        return reminder

    async def save(self, reminder: Reminder) -> Reminder:
        """전체 교체 저장 (ID 기준 upsert)"""
        return await self.store.upsert(reminder)

    async def list(self) -> List[Reminder]:
        """미완료 항목을 먼저, 그 다음 완료 항목 (저장 순서 유지)"""
        reminders = await self.store.get_all()
        return [r for r in reminders if not r.completed] + [r for r in reminders if r.completed]

    async def complete(self, reminder_id: str) -> Optional[Reminder]:
        updated = await self.store.set_completed(reminder_id, True)
        if updated is not None and self.engine is not None:
            self.engine.forget(reminder_id)
        return updated

    async def reopen(self, reminder_id: str) -> Optional[Reminder]:
        return await self.store.set_completed(reminder_id, False)

    async def delete(self, reminder_id: str) -> None:
        await self.store.delete(reminder_id)
        if self.engine is not None:
            self.engine.forget(reminder_id)
        log.info("리마인더 삭제됨", reminder_id=reminder_id)

    # ---- 위치 핀 ----

    async def list_pins(self) -> List[LocationPin]:
        return await self.pins.get_all()

    async def add_pin(self, name: str, latitude: float, longitude: float) -> LocationPin:
        """
        위치 핀을 추가합니다.

        Raises:
            ValidationFailed: 이름 누락, 좌표 범위 오류, 이름 중복
        """
        try:
            pin = LocationPin(name=name, latitude=latitude, longitude=longitude)
        except ValidationError as e:
            raise ValidationFailed(str(e)) from e
        if await self.find_pin(pin.name) is not None:
            raise ValidationFailed(f"Location name already exists: {pin.name}")
        await self.pins.save(pin)
        log.info(f"위치 핀 저장됨 name:{pin.name}")
        return pin

    async def add_pin_here(self, name: str, positions: PositionSourcePort) -> LocationPin:
        """현재 위치로 위치 핀을 추가합니다."""
        position = await positions.get_current()
        return await self.add_pin(name, position.latitude, position.longitude)

    async def delete_pin(self, name: str) -> None:
        await self.pins.delete(name)
