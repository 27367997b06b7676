"""
테스트 공용 도우미 (기록용 싱크, 리마인더 생성기, 기준 시각)
"""

from datetime import datetime, timezone
from typing import List, Optional

from remindthere.common.geo import from_epoch_ms, to_epoch_ms
from remindthere.core.models import Notification, Position, Reminder

# 기준 시각 T (epoch ms)
T0 = to_epoch_ms(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))
HOUR_MS = 60 * 60 * 1000

# 방갈로르 (R1 시나리오)
R1_LAT, R1_LON = 12.9716, 77.5946


class RecordingSink:
    """발송된 알림을 기록하는 테스트용 싱크"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.delivered: List[Notification] = []
        self.attempts = 0

    async def deliver(self, notification: Notification) -> None:
        self.attempts += 1
        if self.fail:
            raise RuntimeError("delivery failed")
        self.delivered.append(notification)


def make_reminder(reminder_id: str = "r1",
                  *,
                  lat: float = R1_LAT,
                  lon: float = R1_LON,
                  start_ms: int = T0,
                  end_ms: int = T0 + HOUR_MS,
                  radius_m: float = 50.0,
                  title: str = "Buy milk",
                  description: Optional[str] = None,
                  completed: bool = False) -> Reminder:
    return Reminder(
        id=reminder_id,
        title=title,
        description=description,
        latitude=lat,
        longitude=lon,
        radius_m=radius_m,
        start_time=from_epoch_ms(start_ms),
        end_time=from_epoch_ms(end_ms),
        completed=completed,
    )


def at(lat: float = R1_LAT, lon: float = R1_LON) -> Position:
    return Position(latitude=lat, longitude=lon)
