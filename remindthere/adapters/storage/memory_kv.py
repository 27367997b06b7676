"""
In-memory key-value store for RemindMeThere.

Used for dry runs and tests; contents are lost on restart.
"""

from typing import Dict, Optional

class MemoryKVStore:
    """메모리 기반 키-값 저장소"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def init(self) -> None:
        return None

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
