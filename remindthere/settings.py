# remindthere/settings.py
from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, Field, field_validator

class EngineConfig(BaseModel):
    radius_m: float = Field(default=50.0, gt=0)
    min_renotify_interval_ms: int = Field(default=2 * 60 * 1000, ge=0)
    tick_interval_sec: float = Field(default=10.0, gt=0)
    tick_timeout_sec: float = 5.0             # 0이면 제한 없음
    title_template: str = "Reminder: {title}"

    @field_validator("title_template")
    @classmethod
    def _template_renders(cls, v: str) -> str:
        # {title}, {location} 외 자리표시자는 거부
        try:
            v.format(title="", location="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"invalid title_template: {e!r}") from e
        return v

class PositionConfig(BaseModel):
    source: Literal["ha", "static"] = "ha"
    entity_id: str = "device_tracker.phone"
    static_latitude: float | None = None
    static_longitude: float | None = None
    min_interval_ms: int = 5000
    min_distance_m: float = 5.0

class NotifyConfig(BaseModel):
    backend: Literal["ha", "mqtt", "log"] = "ha"
    ha_service: str | None = None             # None이면 첫 mobile_app 서비스
    critical: bool = False
    mqtt_host: str = "core-mosquitto"
    mqtt_port: int = 1883
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_topic: str = "remindthere/notifications"

class HAConfig(BaseModel):
    base_url: str = "http://supervisor/core"
    token: str = ""
    timeout_sec: int = 10

class StorageConfig(BaseModel):
    backend: Literal["sqlite", "memory"] = "sqlite"
    sqlite_path: str = "/data/remindthere.db"
    reminders_key: str = "REMINDERS"
    locations_key: str = "LOCATIONS"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "RemindMeThere"
    build_version: str = "0.1.0"
    log_level: str = "INFO"
    log_json: bool = False

class Settings(BaseModel):
    dry_run: bool = False

    engine: EngineConfig = Field(default_factory=EngineConfig)
    position: PositionConfig = Field(default_factory=PositionConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    ha: HAConfig = Field(default_factory=HAConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: Observability = Field(default_factory=Observability)
