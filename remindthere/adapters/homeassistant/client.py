"""
Home Assistant API client for RemindMeThere.

This module provides a client for the Home Assistant REST API:
device tracker states (position source) and notify services
(notification sink).
"""

import aiohttp
from typing import Any, Dict, List, Optional
from remindthere.common.retry import retry_with_backoff
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.ha")

class HAClient:
    """Home Assistant API 클라이언트"""

    def __init__(self,
                 base_url: str,
                 token: str,
                 timeout: int = 10,
                 max_retries: int = 2):
        """
        초기화합니다.

        Args:
            base_url: Home Assistant API 기본 URL
            token: Home Assistant 장기 토큰
            timeout: 요청 타임아웃 (초)
            max_retries: 요청 재시도 횟수
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None

        log.info("Home Assistant 클라이언트 초기화됨")

    async def open(self) -> None:
        """HTTP 세션을 엽니다 (이미 열려 있으면 무시)."""
        if self.session is not None and not self.session.closed:
            return
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json"
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        API 요청을 수행합니다.

        Args:
            method: HTTP 메서드
            endpoint: API 엔드포인트
            **kwargs: 추가 요청 매개변수

        Returns:
            응답 데이터 (JSON)

        Raises:
            aiohttp.ClientError: 재시도 후에도 실패한 경우
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. open() 또는 async with를 사용하세요.")

        url = f"{self.base_url}{endpoint}"

        async def _request():
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                return await response.json()

        return await retry_with_backoff(
            _request,
            max_retries=self.max_retries,
            retry_on=(aiohttp.ClientError, TimeoutError),
        )

    async def get_state(self, entity_id: str) -> Dict:
        """
        엔티티 상태를 가져옵니다.

        Args:
            entity_id: 엔티티 ID (예: "device_tracker.phone")
        """
        return await self._make_request("GET", f"/api/states/{entity_id}")

    async def get_device_location(self, entity_id: str) -> Optional[Dict[str, float]]:
        """
        device_tracker 엔티티의 좌표를 가져옵니다.

        Returns:
            {"latitude", "longitude", "gps_accuracy"} 또는 좌표가 없으면 None
        """
        data = await self.get_state(entity_id)
        attrs = (data or {}).get("attributes", {})
        if "latitude" not in attrs or "longitude" not in attrs:
            log.warning("디바이스 좌표를 찾을 수 없습니다", entity_id=entity_id)
            return None

        location = {
            "latitude": float(attrs["latitude"]),
            "longitude": float(attrs["longitude"]),
        }
        if attrs.get("gps_accuracy") is not None:
            location["gps_accuracy"] = float(attrs["gps_accuracy"])
        return location

    async def list_notify_mobile_services(self) -> List[str]:
        """모바일 앱 notify 서비스 목록을 가져옵니다."""
        try:
            svcs = await self._make_request("GET", "/api/services")
            mobile_services = []
            for service in svcs:
                if service.get("domain") == "notify":
                    for name in service.get("services", {}).keys():
                        if name.startswith("mobile_app_"):
                            mobile_services.append(name)
            log.info(f"모바일 notify 서비스 목록 가져옴 count:{len(mobile_services)}")
            return mobile_services
        except aiohttp.ClientError as e:
            log.error(f"모바일 notify 서비스 목록 가져오기 실패 error:{str(e)}")
            return []

    async def notify(self, service: str, title: str, message: str,
                     data: Optional[Dict] = None) -> Any:
        """
        notify 서비스로 푸시 알림을 발송합니다.

        Raises:
            aiohttp.ClientError: 발송 실패
        """
        payload: Dict[str, Any] = {"title": title, "message": message}
        if data:
            payload["data"] = data

        try:
            result = await self._make_request(
                "POST", f"/api/services/notify/{service}", json=payload
            )
        except Exception as e:
            log.error(f"푸시 알림 발송 실패 service:{service} error:{str(e)}")
            raise
        log.info(f"푸시 알림 발송 성공 service:{service}")
        return result
