"""
Per-reminder tracking state for the geofence engine.

Both maps live in process memory and are owned by a single
GeofenceEngine instance; they are not persisted across restarts.
"""

from typing import Dict, Iterable, Optional, Set

class TransitionState:
    """리마인더별 '현재 영역 내부' 여부"""

    def __init__(self, initial: Optional[Dict[str, bool]] = None):
        self._inside: Dict[str, bool] = dict(initial or {})

    def was_inside(self, reminder_id: str) -> bool:
        # 항목이 없으면 외부로 간주
        return self._inside.get(reminder_id, False)

    def mark(self, reminder_id: str, inside: bool) -> None:
        self._inside[reminder_id] = inside

    def discard(self, reminder_id: str) -> bool:
        return self._inside.pop(reminder_id, None) is not None

    def ids(self) -> Set[str]:
        return set(self._inside)

    def inside_count(self) -> int:
        return sum(1 for v in self._inside.values() if v)

    def as_dict(self) -> Dict[str, bool]:
        return dict(self._inside)

    def __contains__(self, reminder_id: str) -> bool:
        return reminder_id in self._inside

    def __len__(self) -> int:
        return len(self._inside)

class ThrottleState:
    """리마인더별 마지막 알림 시각 (epoch ms)과 재알림 최소 간격"""

    def __init__(self, min_interval_ms: int, initial: Optional[Dict[str, int]] = None):
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms must be >= 0")
        self.min_interval_ms = min_interval_ms
        self._last: Dict[str, int] = dict(initial or {})

    def last_notified(self, reminder_id: str) -> Optional[int]:
        return self._last.get(reminder_id)

    def allows(self, reminder_id: str, now_ms: int) -> bool:
        """기록이 없거나 최소 간격이 지났으면 True"""
        last = self._last.get(reminder_id)
        return last is None or now_ms - last >= self.min_interval_ms

    def record(self, reminder_id: str, now_ms: int) -> None:
        self._last[reminder_id] = now_ms

    def discard(self, reminder_id: str) -> bool:
        return self._last.pop(reminder_id, None) is not None

    def ids(self) -> Set[str]:
        return set(self._last)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._last)

    def __contains__(self, reminder_id: str) -> bool:
        return reminder_id in self._last

    def __len__(self) -> int:
        return len(self._last)

def stale_ids(active: Iterable[str], *states) -> Set[str]:
    """활성 집합에 없는 추적 ID"""
    tracked: Set[str] = set()
    for s in states:
        tracked |= s.ids()
    return tracked - set(active)
