"""
Reminder store port interface.

This module defines the protocols for reading and mutating
reminder records and location pins.
"""

from typing import List, Optional, Protocol
from remindthere.core.models import LocationPin, Reminder

class ReminderStorePort(Protocol):
    """리마인더 저장소 포트 인터페이스"""
    
    async def get_all(self) -> List[Reminder]:
        """
        저장된 모든 리마인더를 조회합니다.
        
        Raises:
            TransientIOError: 저장소를 사용할 수 없는 경우
        """
        ...
    
    async def upsert(self, reminder: Reminder) -> Reminder:
        """
        ID 기준으로 리마인더를 추가하거나 교체합니다.
        """
        ...
    
    async def delete(self, reminder_id: str) -> None:
        """
        리마인더를 삭제합니다. 없는 ID는 무시합니다.
        """
        ...
    
    async def set_completed(self, reminder_id: str, completed: bool) -> Optional[Reminder]:
        """
        완료 여부를 설정합니다 (멱등).
        
        Returns:
            갱신된 리마인더, 없으면 None
        """
        ...

class LocationPinStorePort(Protocol):
    """위치 핀 저장소 포트 인터페이스"""

    async def get_all(self) -> List[LocationPin]:
        ...

    async def save(self, pin: LocationPin) -> LocationPin:
        ...

    async def delete(self, name: str) -> None:
        ...
