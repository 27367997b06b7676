"""
SQLite-based key-value store for RemindMeThere.

This module implements KVStorePort on top of aiosqlite. Each
collection (reminders, pins) is a single JSON document under one key.
"""

import aiosqlite
import time
from typing import Optional
from remindthere.core.errors import TransientIOError
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.kv")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    k TEXT PRIMARY KEY,
    v TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);
"""

class SQLiteKVStore:
    """SQLite 기반 키-값 저장소"""
    
    def __init__(self, path: str):
        """
        초기화합니다.
        
        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteKVStore 초기화: {path}")
    
    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.executescript(SCHEMA)
                await db.commit()
        except aiosqlite.Error as e:
            raise TransientIOError(f"kv schema init failed: {e}") from e
        log.info("SQLiteKVStore 스키마 초기화 완료")
    
    async def get(self, key: str) -> Optional[str]:
        """
        키로 값을 조회합니다.
        
        Raises:
            TransientIOError: 데이터베이스 오류
        """
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute("SELECT v FROM kv WHERE k = ?", (key,))
                row = await cursor.fetchone()
                return row[0] if row else None
        except aiosqlite.Error as e:
            log.error(f"SQLiteKVStore get 오류: {e}")
            raise TransientIOError(f"kv get failed: {e}") from e
    
    async def set(self, key: str, value: str) -> None:
        """
        키-값을 저장합니다 (있으면 덮어쓰기).
        
        Raises:
            TransientIOError: 데이터베이스 오류
        """
        now = int(time.time())
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(
                    "INSERT INTO kv (k, v, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(k) DO UPDATE SET v = excluded.v, updated_at = excluded.updated_at",
                    (key, value, now)
                )
                await db.commit()
        except aiosqlite.Error as e:
            log.error(f"SQLiteKVStore set 오류: {e}")
            raise TransientIOError(f"kv set failed: {e}") from e
    
    async def delete(self, key: str) -> None:
        """
        키를 삭제합니다.
        
        Raises:
            TransientIOError: 데이터베이스 오류
        """
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute("DELETE FROM kv WHERE k = ?", (key,))
                await db.commit()
        except aiosqlite.Error as e:
            log.error(f"SQLiteKVStore delete 오류: {e}")
            raise TransientIOError(f"kv delete failed: {e}") from e
