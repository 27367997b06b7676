"""
Core domain models for RemindMeThere.

This module defines the core domain models using Pydantic v2
for type safety and validation. Reminder records keep the camelCase
field names of the persisted JSON document as aliases.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from remindthere.common.geo import ensure_aware, to_epoch_ms

DEFAULT_RADIUS_M = 50.0
DEFAULT_BODY = "You have a location-based reminder!"

Transition = Literal["enter", "exit", "none"]

class Reminder(BaseModel):
    """위치 기반 리마인더 모델"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    title: str
    description: Optional[str] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    location_name: Optional[str] = Field(default=None, alias="locationName")
    radius_m: float = Field(default=DEFAULT_RADIUS_M, gt=0, alias="radiusM")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    completed: bool = False

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("description", "location_name")
    @classmethod
    def _blank_is_missing(cls, v: Optional[str]) -> Optional[str]:
        # 빈 문자열은 None(누락)으로 정규화
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def _window_order(self) -> "Reminder":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self

    @property
    def start_ms(self) -> int:
        return to_epoch_ms(self.start_time)

    @property
    def end_ms(self) -> int:
        return to_epoch_ms(self.end_time)

    def to_record(self) -> dict:
        """저장용 JSON 호환 딕셔너리"""
        return self.model_dump(mode="json", by_alias=True)

class LocationPin(BaseModel):
    """이름 붙은 위치 핀 (리마인더 작성용)"""
    name: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("pin name must not be empty")
        return v

class Position(BaseModel):
    """디바이스의 최신 위치"""
    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None
    timestamp_ms: Optional[int] = None

class Notification(BaseModel):
    """발송할 알림 내용"""
    title: str
    body: str
    reminder_id: Optional[str] = None

class GeofenceDecision(BaseModel):
    """리마인더 하나에 대한 틱 평가 결과"""
    reminder_id: str
    is_inside: bool
    was_inside: bool
    transition: Transition
    notify: bool
    distance_m: float
    reason: str

@dataclass
class TickReport:
    """틱 실행 요약"""
    now_ms: int
    evaluated: int = 0
    entered: List[str] = field(default_factory=list)
    exited: List[str] = field(default_factory=list)
    fired: List[str] = field(default_factory=list)
    throttled: List[str] = field(default_factory=list)
    delivery_failures: List[str] = field(default_factory=list)
    skipped_invalid: List[str] = field(default_factory=list)
    purged: List[str] = field(default_factory=list)
