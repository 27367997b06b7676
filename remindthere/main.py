# remindthere/main.py
import os, asyncio, signal
from typing import Optional, Tuple
import uvicorn
from remindthere.settings import Settings
from remindthere.observability.health import create_app
from remindthere.observability.logging_setup import setup_logging, get_logger
from remindthere.adapters.homeassistant.client import HAClient
from remindthere.adapters.storage import SQLiteKVStore, MemoryKVStore, KVReminderStore, KVLocationPinStore
from remindthere.adapters.position import HAPositionSource, StaticPositionSource
from remindthere.adapters.notify import HANotificationSink, MqttNotificationSink, LogNotificationSink
from remindthere.core.engine import GeofenceEngine
from remindthere.core.models import Position
from remindthere.orchestrators.scheduler import SchedulingDriver
from remindthere.features.reminder_authoring import ReminderAuthoring

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _f(name, default):
    v = os.getenv(name)
    return float(v) if v not in (None, "") else default

def build_settings() -> Settings:
    s = Settings()
    # 플래그
    s.dry_run = _b("DRY_RUN", s.dry_run)

    # 엔진
    s.engine.radius_m = _f("GEOFENCE_RADIUS_M", s.engine.radius_m)
    s.engine.min_renotify_interval_ms = int(os.getenv("MIN_RENOTIFY_INTERVAL_MS", s.engine.min_renotify_interval_ms))
    s.engine.tick_interval_sec = _f("TICK_INTERVAL_SEC", s.engine.tick_interval_sec)
    s.engine.tick_timeout_sec = _f("TICK_TIMEOUT_SEC", s.engine.tick_timeout_sec)
    s.engine.title_template = os.getenv("TITLE_TEMPLATE", s.engine.title_template)

    # 위치
    s.position.source = os.getenv("POSITION_SOURCE", s.position.source)
    s.position.entity_id = os.getenv("POSITION_ENTITY_ID", s.position.entity_id)
    s.position.static_latitude = _f("STATIC_LATITUDE", s.position.static_latitude)
    s.position.static_longitude = _f("STATIC_LONGITUDE", s.position.static_longitude)
    s.position.min_interval_ms = int(os.getenv("POSITION_MIN_INTERVAL_MS", s.position.min_interval_ms))
    s.position.min_distance_m = _f("POSITION_MIN_DISTANCE_M", s.position.min_distance_m)

    # 알림
    s.notify.backend = os.getenv("NOTIFY_BACKEND", s.notify.backend)
    s.notify.ha_service = os.getenv("NOTIFY_SERVICE", s.notify.ha_service)
    s.notify.critical = _b("NOTIFY_CRITICAL", s.notify.critical)
    s.notify.mqtt_host = os.getenv("MQTT_HOST", s.notify.mqtt_host)
    s.notify.mqtt_port = int(os.getenv("MQTT_PORT", s.notify.mqtt_port))
    s.notify.mqtt_username = os.getenv("MQTT_USERNAME", s.notify.mqtt_username)
    s.notify.mqtt_password = os.getenv("MQTT_PASSWORD", s.notify.mqtt_password)
    s.notify.mqtt_topic = os.getenv("MQTT_TOPIC", s.notify.mqtt_topic)

    # HA (애드온 환경에서는 SUPERVISOR_TOKEN 사용)
    s.ha.base_url = os.getenv("HA_BASE_URL", s.ha.base_url)
    s.ha.token = os.getenv("HA_TOKEN", os.getenv("SUPERVISOR_TOKEN", s.ha.token))

    # 저장소
    s.storage.backend = os.getenv("STORAGE_BACKEND", s.storage.backend)
    s.storage.sqlite_path = os.getenv("SQLITE_PATH", s.storage.sqlite_path)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("METRICS_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_json = _b("LOG_JSON", s.observability.log_json)

    return Settings.model_validate(s.model_dump())

def build_position_source(s: Settings, ha: HAClient):
    if s.position.source == "static":
        position = None
        if s.position.static_latitude is not None and s.position.static_longitude is not None:
            position = Position(latitude=s.position.static_latitude, longitude=s.position.static_longitude)
        return StaticPositionSource(position)
    return HAPositionSource(ha, s.position.entity_id)

def build_sink(s: Settings, ha: HAClient):
    if s.dry_run or s.notify.backend == "log":
        return LogNotificationSink()
    if s.notify.backend == "mqtt":
        return MqttNotificationSink(
            broker_host=s.notify.mqtt_host,
            broker_port=s.notify.mqtt_port,
            topic=s.notify.mqtt_topic,
            username=s.notify.mqtt_username,
            password=s.notify.mqtt_password,
        )
    return HANotificationSink(ha, s.notify.ha_service, critical=s.notify.critical)

async def build_kv(s: Settings):
    if s.storage.backend == "memory":
        kv = MemoryKVStore()
    else:
        kv = SQLiteKVStore(s.storage.sqlite_path)
    await kv.init()
    return kv

def build_authoring(s: Settings, kv, engine: Optional[GeofenceEngine] = None,
                    store: Optional[KVReminderStore] = None) -> ReminderAuthoring:
    """리마인더 작성 기능 조립. 서비스 루프는 사용하지 않으며 같은 저장소를 공유하는 호출자용."""
    return ReminderAuthoring(
        store or KVReminderStore(kv, s.storage.reminders_key),
        KVLocationPinStore(kv, s.storage.locations_key),
        engine=engine,
        default_radius_m=s.engine.radius_m,
    )

def build_driver(s: Settings, store: KVReminderStore, ha: HAClient) -> Tuple[GeofenceEngine, SchedulingDriver]:
    engine = GeofenceEngine(
        build_sink(s, ha),
        min_renotify_interval_ms=s.engine.min_renotify_interval_ms,
        title_template=s.engine.title_template,
    )
    driver = SchedulingDriver(
        engine,
        store,
        build_position_source(s, ha),
        interval_sec=s.engine.tick_interval_sec,
        tick_timeout_sec=s.engine.tick_timeout_sec or None,
        min_interval_ms=s.position.min_interval_ms,
        min_distance_m=s.position.min_distance_m,
    )
    return engine, driver

async def start_http(settings: Settings, driver: SchedulingDriver) -> Optional[asyncio.Task]:
    if not settings.observability.metrics_enabled: return None
    app = create_app(settings, driver)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port, log_level="info")
    ).serve())

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, json=s.observability.log_json)
    log = get_logger()
    log.info("설정 로드 완료")

    ha = HAClient(base_url=s.ha.base_url, token=s.ha.token, timeout=s.ha.timeout_sec)
    await ha.open()

    kv = await build_kv(s)
    store = KVReminderStore(kv, s.storage.reminders_key)
    _, driver = build_driver(s, store, ha)

    http_task = await start_http(s, driver)
    if http_task:
        log.info("HTTP 서버 시작됨")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    log.info("스케줄러 시작")
    await driver.start()
    try:
        await stop
    finally:
        await driver.stop()
        if http_task: http_task.cancel()
        await ha.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
