"""
Geographic utilities for RemindMeThere.

This module provides the great-circle distance used to decide
whether a position lies inside a reminder's trigger radius, plus
coordinate and timestamp helpers shared by the store and the engine.
"""

import math
from datetime import datetime, timezone, timedelta

# 지구 반지름 (미터)
EARTH_RADIUS_M = 6_371_000.0

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (미터).

    입력 범위는 검증하지 않습니다. 범위를 벗어난 값도 계산은 되지만
    의미 없는 결과가 나옵니다.

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (미터, 0 이상)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)

    # 위도와 경도의 차이
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    # Haversine 공식
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # 부동소수 오차로 1을 넘지 않도록
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유한하고 범위 내이면 True
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180

def ensure_aware(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주합니다."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def to_epoch_ms(dt: datetime) -> int:
    """datetime을 epoch 밀리초(정수)로 정확히 변환합니다."""
    return (ensure_aware(dt) - EPOCH) // timedelta(milliseconds=1)

def from_epoch_ms(ms: int) -> datetime:
    """epoch 밀리초를 UTC datetime으로 변환합니다."""
    return EPOCH + timedelta(milliseconds=ms)

def now_ms() -> int:
    """현재 시각 (epoch 밀리초)"""
    return to_epoch_ms(datetime.now(timezone.utc))
