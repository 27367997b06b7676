"""
지리 유틸리티 단위 테스트

Haversine 거리, 좌표 검증, epoch 밀리초 변환을 테스트합니다.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st

from remindthere.common.geo import (
    distance_meters, validate_coordinates, to_epoch_ms, from_epoch_ms, ensure_aware
)

lats = st.floats(min_value=-90, max_value=90, allow_nan=False)
lons = st.floats(min_value=-180, max_value=180, allow_nan=False)


class TestDistanceMeters:
    """Haversine 거리 계산 테스트"""

    @given(lat1=lats, lon1=lons, lat2=lats, lon2=lons)
    def test_symmetric(self, lat1, lon1, lat2, lon2):
        """d(a, b) == d(b, a)"""
        assert distance_meters(lat1, lon1, lat2, lon2) == pytest.approx(
            distance_meters(lat2, lon2, lat1, lon1), abs=1e-6)

    @given(lat=lats, lon=lons)
    def test_identity_is_zero(self, lat, lon):
        """d(a, a) == 0"""
        assert distance_meters(lat, lon, lat, lon) == 0.0

    @given(lat1=lats, lon1=lons, lat2=lats, lon2=lons)
    def test_non_negative_and_bounded(self, lat1, lon1, lat2, lon2):
        """0 이상, 지구 반 둘레 이하"""
        d = distance_meters(lat1, lon1, lat2, lon2)
        assert 0.0 <= d <= math.pi * 6_371_000 + 1e-6

    def test_one_degree_longitude_on_equator(self):
        """(0,0)-(0,1) 약 111,195m"""
        assert distance_meters(0, 0, 0, 1) == pytest.approx(111_195, abs=1)

    def test_one_degree_latitude(self):
        assert distance_meters(0, 0, 1, 0) == pytest.approx(111_195, abs=1)

    def test_antipodal(self):
        """지구 반대편"""
        assert distance_meters(0, 0, 0, 180) == pytest.approx(math.pi * 6_371_000, rel=1e-9)

    def test_short_distance(self):
        """0.0004도 위도 차이는 약 44m"""
        d = distance_meters(12.9716, 77.5946, 12.9720, 77.5946)
        assert 44 <= d <= 45


class TestValidateCoordinates:
    """좌표 검증 테스트"""

    @pytest.mark.parametrize("lat,lon", [(0, 0), (90, 180), (-90, -180), (12.97, 77.59)])
    def test_valid(self, lat, lon):
        assert validate_coordinates(lat, lon)

    @pytest.mark.parametrize("lat,lon", [(91, 0), (0, 181), (-90.1, 0), (float("nan"), 0), (0, float("inf"))])
    def test_invalid(self, lat, lon):
        assert not validate_coordinates(lat, lon)


class TestEpochMs:
    """epoch 밀리초 변환 테스트"""

    def test_naive_is_utc(self):
        naive = datetime(2025, 1, 1, 0, 0)
        assert to_epoch_ms(naive) == to_epoch_ms(naive.replace(tzinfo=timezone.utc))
        assert ensure_aware(naive).tzinfo is timezone.utc

    def test_offset_aware(self):
        kst = timezone(timedelta(hours=9))
        assert to_epoch_ms(datetime(2025, 1, 1, 9, 0, tzinfo=kst)) == \
            to_epoch_ms(datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc))

    @given(ms=st.integers(min_value=0, max_value=4_102_444_800_000))
    def test_exact_millisecond_precision(self, ms):
        """밀리초 단위 변환에 오차 없음"""
        assert to_epoch_ms(from_epoch_ms(ms)) == ms
