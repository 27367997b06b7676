"""
Position source port interface.

This module defines the protocol for obtaining the device position,
either once or as a subscription.
"""

from typing import Awaitable, Callable, Protocol, Union
from remindthere.core.models import Position

PositionCallback = Callable[[Position], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]

class PositionSourcePort(Protocol):
    """위치 소스 포트 인터페이스"""
    
    async def get_current(self) -> Position:
        """
        현재 위치를 한 번 조회합니다.
        
        Raises:
            TransientIOError: 위치를 가져올 수 없는 경우
        """
        ...
    
    async def watch(self,
                    callback: PositionCallback,
                    *,
                    min_interval_ms: int = 5000,
                    min_distance_m: float = 5.0) -> Unsubscribe:
        """
        위치 변화를 구독합니다.
        
        Args:
            callback: 새 위치를 받을 콜백
            min_interval_ms: 최소 갱신 간격 (밀리초)
            min_distance_m: 최소 이동 거리 (미터)
            
        Returns:
            구독 해제 함수
        """
        ...
