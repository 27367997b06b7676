"""
HTTP endpoints for RemindMeThere observability.

This module implements health, readiness, metrics, info and engine
state endpoints for monitoring and operational visibility.
"""

from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
from remindthere.settings import Settings
from remindthere.orchestrators.scheduler import SchedulingDriver
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.http")

def create_app(settings: Settings, driver: Optional[SchedulingDriver] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="RemindMeThere geofence reminder service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크: 스케줄러가 돌고 있고 위치를 알고 있어야 함"""
        if driver is None or not driver.running or not driver.has_position:
            return JSONResponse(status_code=503, content={
                "status": "not_ready",
                "scheduler_running": bool(driver and driver.running),
                "has_position": bool(driver and driver.has_position),
            })
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "tick_interval_sec": settings.engine.tick_interval_sec,
            "min_renotify_interval_ms": settings.engine.min_renotify_interval_ms,
            "dry_run": settings.dry_run,
        })

    @app.get("/state")
    async def state():
        """엔진 진단 상태 (진입/스로틀 맵, 마지막 틱 요약)"""
        if driver is None:
            raise HTTPException(status_code=404, detail="scheduler not attached")
        report = driver.last_report
        return JSONResponse({
            "engine": driver.engine.snapshot(),
            "position": driver.position.model_dump() if driver.position else None,
            "last_tick": None if report is None else {
                "now_ms": report.now_ms,
                "evaluated": report.evaluated,
                "fired": report.fired,
                "entered": report.entered,
                "exited": report.exited,
                "skipped_invalid": report.skipped_invalid,
            },
        })

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "state": "/state"
            }
        })

    return app
