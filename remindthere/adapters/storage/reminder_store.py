"""
Key-value backed reminder and location pin stores.

Reminders are stored as one JSON list under a single key and every
mutation is a read-modify-write of that list. Records are validated
here, at the store boundary, so the engine receives well-formed
Reminder models. Malformed records are reported and skipped on read
but preserved on write.
"""

import asyncio
import json
from typing import List, Optional
from pydantic import ValidationError

from remindthere.core.errors import InvalidReminderError, TransientIOError
from remindthere.core.models import LocationPin, Reminder
from remindthere.observability import metrics
from remindthere.observability.logging_setup import get_logger
from remindthere.ports.kvstore import KVStorePort

log = get_logger("remindthere.store")

REMINDERS_KEY = "REMINDERS"
LOCATIONS_KEY = "LOCATIONS"

async def _load_list(kv: KVStorePort, key: str) -> List[dict]:
    """키의 JSON 리스트를 읽습니다. 값이 없으면 빈 리스트."""
    raw = await kv.get(key)
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TransientIOError(f"corrupt document under {key}: {e}") from e
    if not isinstance(data, list):
        raise TransientIOError(f"document under {key} is not a list")
    return data

async def _save_list(kv: KVStorePort, key: str, items: List[dict]) -> None:
    await kv.set(key, json.dumps(items, ensure_ascii=False))

class KVReminderStore:
    """KV 저장소 기반 리마인더 저장소"""

    def __init__(self, kv: KVStorePort, key: str = REMINDERS_KEY):
        """
        초기화합니다.

        Args:
            kv: 키-값 저장소 포트
            key: 리마인더 목록을 저장할 키
        """
        self.kv = kv
        self.key = key
        # 같은 프로세스 내 읽기-수정-쓰기 직렬화
        self._lock = asyncio.Lock()

    async def get_all(self) -> List[Reminder]:
        """
        저장된 리마인더를 모두 조회합니다. 검증에 실패한 레코드는 건너뜁니다.

        Raises:
            TransientIOError: 저장소를 읽을 수 없는 경우
        """
        reminders: List[Reminder] = []
        for idx, item in enumerate(await _load_list(self.kv, self.key)):
            if not item:
                continue
            try:
                reminders.append(Reminder.model_validate(item))
            except ValidationError as e:
                rid = item.get("id", f"#{idx}") if isinstance(item, dict) else f"#{idx}"
                metrics.invalid_reminders.labels(stage="store").inc()
                log.warning("잘못된 리마인더 레코드 건너뜀",
                            reminder_id=rid,
                            errors=e.error_count())
        return reminders

    async def get(self, reminder_id: str) -> Optional[Reminder]:
        for r in await self.get_all():
            if r.id == reminder_id:
                return r
        return None

    async def upsert(self, reminder: Reminder) -> Reminder:
        """ID 기준으로 추가하거나 교체합니다."""
        async with self._lock:
            items = await _load_list(self.kv, self.key)
            record = reminder.to_record()
            for i, item in enumerate(items):
                if isinstance(item, dict) and item.get("id") == reminder.id:
                    items[i] = record
                    break
            else:
                items.append(record)
            await _save_list(self.kv, self.key, items)
        log.debug("리마인더 저장됨", reminder_id=reminder.id)
        return reminder

    async def delete(self, reminder_id: str) -> None:
        async with self._lock:
            items = await _load_list(self.kv, self.key)
            kept = [i for i in items if not (isinstance(i, dict) and i.get("id") == reminder_id)]
            if len(kept) != len(items):
                await _save_list(self.kv, self.key, kept)
                log.debug("리마인더 삭제됨", reminder_id=reminder_id)

    async def set_completed(self, reminder_id: str, completed: bool) -> Optional[Reminder]:
        """
        완료 여부를 설정합니다 (멱등).

        Returns:
            갱신된 리마인더, 없으면 None

        Raises:
            InvalidReminderError: 저장된 레코드가 손상된 경우
        """
        async with self._lock:
            items = await _load_list(self.kv, self.key)
            for i, item in enumerate(items):
                if isinstance(item, dict) and item.get("id") == reminder_id:
                    try:
                        updated = Reminder.model_validate({**item, "completed": completed})
                    except ValidationError as e:
                        raise InvalidReminderError(reminder_id, f"stored record invalid: {e.error_count()} errors") from e
                    items[i] = updated.to_record()
                    await _save_list(self.kv, self.key, items)
                    return updated
        return None

class KVLocationPinStore:
    """KV 저장소 기반 위치 핀 저장소 (이름이 키)"""

    def __init__(self, kv: KVStorePort, key: str = LOCATIONS_KEY):
        self.kv = kv
        self.key = key
        self._lock = asyncio.Lock()

    async def get_all(self) -> List[LocationPin]:
        pins: List[LocationPin] = []
        for item in await _load_list(self.kv, self.key):
            try:
                pins.append(LocationPin.model_validate(item))
            except ValidationError:
                log.warning("잘못된 위치 핀 레코드 건너뜀", record=str(item)[:80])
        return pins

    async def save(self, pin: LocationPin) -> LocationPin:
        """같은 이름이 있으면 교체합니다."""
        async with self._lock:
            items = [i for i in await _load_list(self.kv, self.key)
                     if not (isinstance(i, dict) and i.get("name") == pin.name)]
            items.append(pin.model_dump())
            await _save_list(self.kv, self.key, items)
        return pin

    async def delete(self, name: str) -> None:
        async with self._lock:
            items = await _load_list(self.kv, self.key)
            kept = [i for i in items if not (isinstance(i, dict) and i.get("name") == name)]
            if len(kept) != len(items):
                await _save_list(self.kv, self.key, kept)
