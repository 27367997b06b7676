"""
도메인 모델 단위 테스트

리마인더 검증 규칙과 저장 형식(camelCase 별칭)을 테스트합니다.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from remindthere.core.message_template import create_notification
from remindthere.core.models import LocationPin, Reminder
from tests.helpers import HOUR_MS, T0, make_reminder

START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _record(**overrides):
    record = {
        "id": "1700000000000",
        "title": "Pick up parcel",
        "description": "Counter 3",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "locationName": "Post office",
        "startTime": "2025-03-01T09:00:00.000Z",
        "endTime": "2025-03-01T10:00:00.000Z",
        "completed": False,
    }
    record.update(overrides)
    return record


class TestReminderValidation:
    """리마인더 검증 테스트"""

    def test_parses_stored_record(self):
        """저장 형식(camelCase, ISO 문자열) 파싱"""
        r = Reminder.model_validate(_record())

        assert r.location_name == "Post office"
        assert r.start_ms == T0
        assert r.end_ms == T0 + HOUR_MS
        assert r.radius_m == 50.0
        assert r.completed is False

    def test_record_roundtrip_uses_aliases(self):
        record = make_reminder().to_record()

        assert "startTime" in record and "endTime" in record
        assert "radiusM" in record
        assert Reminder.model_validate(record).model_dump() == make_reminder().model_dump()

    def test_end_must_be_after_start(self):
        with pytest.raises(ValidationError):
            Reminder.model_validate(_record(endTime="2025-03-01T09:00:00.000Z"))

    @pytest.mark.parametrize("title", ["", "   "])
    def test_title_required(self, title):
        with pytest.raises(ValidationError):
            Reminder.model_validate(_record(title=title))

    @pytest.mark.parametrize("field,value", [("latitude", 91), ("longitude", -181)])
    def test_coordinates_range(self, field, value):
        with pytest.raises(ValidationError):
            Reminder.model_validate(_record(**{field: value}))

    @pytest.mark.parametrize("field", ["latitude", "startTime"])
    def test_missing_required_fields(self, field):
        record = _record()
        del record[field]
        with pytest.raises(ValidationError):
            Reminder.model_validate(record)

    def test_blank_description_is_missing(self):
        """빈 설명은 None 으로 정규화"""
        assert Reminder.model_validate(_record(description="")).description is None

    def test_naive_times_are_utc(self):
        r = Reminder.model_validate(_record(startTime="2025-03-01T09:00:00", endTime="2025-03-01T10:00:00"))
        assert r.start_ms == T0

    @given(minutes=st.integers(min_value=1, max_value=10_000))
    def test_any_positive_window_is_valid(self, minutes):
        r = Reminder(id="x", title="t", latitude=0, longitude=0,
                     start_time=START, end_time=START + timedelta(minutes=minutes))
        assert r.end_ms - r.start_ms == minutes * 60_000

    def test_radius_must_be_positive(self):
        with pytest.raises(ValidationError):
            Reminder.model_validate(_record(radiusM=0))


class TestLocationPin:
    """위치 핀 검증 테스트"""

    def test_valid_pin(self):
        pin = LocationPin(name=" Library ", latitude=1.0, longitude=2.0)
        assert pin.name == "Library"

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            LocationPin(name=" ", latitude=1.0, longitude=2.0)


class TestMessageTemplate:
    """알림 메시지 템플릿 테스트"""

    def test_default_body(self):
        n = create_notification(make_reminder(title="Gym"))
        assert n.title == "Reminder: Gym"
        assert n.body == "You have a location-based reminder!"
        assert n.reminder_id == "r1"

    def test_custom_title_template(self):
        r = make_reminder(title="Gym").model_copy(update={"location_name": "Campus"})
        n = create_notification(r, title_template="{title} @ {location}")
        assert n.title == "Gym @ Campus"
