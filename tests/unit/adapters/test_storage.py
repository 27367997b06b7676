"""
저장소 어댑터 단위 테스트

SQLite/메모리 KV 저장소와 그 위의 리마인더/위치 핀 저장소를 테스트합니다.
"""

import json

import pytest

from remindthere.adapters.storage import (
    KVLocationPinStore,
    KVReminderStore,
    MemoryKVStore,
    SQLiteKVStore,
)
from remindthere.core.errors import InvalidReminderError, TransientIOError
from remindthere.core.models import LocationPin
from tests.helpers import make_reminder


class TestSQLiteKVStore:
    """SQLite KV 저장소 테스트"""

    @pytest.mark.asyncio
    async def test_set_get_overwrite_delete(self, temp_db_path):
        kv = SQLiteKVStore(temp_db_path)
        await kv.init()

        assert await kv.get("REMINDERS") is None

        await kv.set("REMINDERS", "[]")
        await kv.set("REMINDERS", '[{"id": "1"}]')
        assert await kv.get("REMINDERS") == '[{"id": "1"}]'

        await kv.delete("REMINDERS")
        assert await kv.get("REMINDERS") is None

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, temp_db_path):
        kv = SQLiteKVStore(temp_db_path)
        await kv.init()
        await kv.set("k", "v")
        await kv.init()
        assert await kv.get("k") == "v"

    @pytest.mark.asyncio
    async def test_missing_table_is_transient(self, temp_db_path):
        """스키마가 없으면 TransientIOError"""
        kv = SQLiteKVStore(temp_db_path)
        with pytest.raises(TransientIOError):
            await kv.get("k")


class TestKVReminderStore:
    """리마인더 저장소 테스트"""

    @pytest.fixture
    def kv(self):
        return MemoryKVStore()

    @pytest.fixture
    def store(self, kv):
        return KVReminderStore(kv)

    @pytest.mark.asyncio
    async def test_empty(self, store):
        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_upsert_appends_then_replaces(self, store, kv):
        await store.upsert(make_reminder("1", title="A"))
        await store.upsert(make_reminder("2", title="B"))
        await store.upsert(make_reminder("1", title="A2"))

        reminders = await store.get_all()
        assert [r.id for r in reminders] == ["1", "2"]
        assert reminders[0].title == "A2"

        # 저장 형식은 camelCase JSON 리스트
        raw = json.loads(await kv.get("REMINDERS"))
        assert raw[0]["startTime"].endswith("Z")

    @pytest.mark.asyncio
    async def test_get_and_delete(self, store):
        await store.upsert(make_reminder("1"))
        assert (await store.get("1")).id == "1"

        await store.delete("1")
        await store.delete("missing")
        assert await store.get("1") is None

    @pytest.mark.asyncio
    async def test_set_completed(self, store):
        await store.upsert(make_reminder("1"))

        updated = await store.set_completed("1", True)
        again = await store.set_completed("1", True)

        assert updated.completed is True
        assert again.completed is True
        assert (await store.get("1")).completed is True
        assert await store.set_completed("missing", True) is None

    @pytest.mark.asyncio
    async def test_malformed_records_are_skipped_but_kept(self, kv, store):
        good = make_reminder("1").to_record()
        bad = {"id": "2", "title": "", "latitude": 500}
        await kv.set("REMINDERS", json.dumps([good, bad, None]))

        assert [r.id for r in await store.get_all()] == ["1"]

        await store.upsert(make_reminder("3"))
        raw = json.loads(await kv.get("REMINDERS"))
        assert [item and item.get("id") for item in raw] == ["1", "2", None, "3"]

    @pytest.mark.asyncio
    async def test_set_completed_on_corrupt_record(self, kv, store):
        await kv.set("REMINDERS", json.dumps([{"id": "2", "title": "x"}]))
        with pytest.raises(InvalidReminderError) as exc_info:
            await store.set_completed("2", True)
        assert exc_info.value.reminder_id == "2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["{not json", '{"id": "1"}'])
    async def test_corrupt_document(self, kv, store, raw):
        await kv.set("REMINDERS", raw)
        with pytest.raises(TransientIOError):
            await store.get_all()

    @pytest.mark.asyncio
    async def test_on_sqlite(self, temp_db_path):
        kv = SQLiteKVStore(temp_db_path)
        await kv.init()
        store = KVReminderStore(kv)

        await store.upsert(make_reminder("1", description="Oat milk"))
        reopened = KVReminderStore(SQLiteKVStore(temp_db_path))

        [r] = await reopened.get_all()
        assert r.description == "Oat milk"
        assert r.model_dump() == make_reminder("1", description="Oat milk").model_dump()


class TestKVLocationPinStore:
    """위치 핀 저장소 테스트"""

    @pytest.mark.asyncio
    async def test_save_replaces_by_name(self):
        pins = KVLocationPinStore(MemoryKVStore())
        await pins.save(LocationPin(name="Home", latitude=1.0, longitude=2.0))
        await pins.save(LocationPin(name="Work", latitude=3.0, longitude=4.0))
        await pins.save(LocationPin(name="Home", latitude=5.0, longitude=6.0))

        stored = await pins.get_all()
        assert [p.name for p in stored] == ["Work", "Home"]
        assert stored[1].latitude == 5.0

    @pytest.mark.asyncio
    async def test_delete(self):
        pins = KVLocationPinStore(MemoryKVStore())
        await pins.save(LocationPin(name="Home", latitude=1.0, longitude=2.0))
        await pins.delete("Home")
        assert await pins.get_all() == []
