"""
Unit tests for the user stores.
"""

from datetime import datetime, timezone

import asyncpg
import pytest

from core import db
from users import repository
from users.repository import InMemoryUserStore, PostgresUserStore, UserConstraintError


def _row(user_id: int = 1, name: str = "Ada", age: int | None = 30) -> dict:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return {"id": user_id, "name": name, "age": age, "created_at": now, "updated_at": now}


@pytest.mark.anyio
class TestInMemoryUserStore:
    async def test_insert_assigns_increasing_ids(self):
        store = InMemoryUserStore()

        first = await store.insert({"name": "Ada", "age": 30})
        second = await store.insert({"name": "Grace", "age": 45})

        assert first["id"] == 1
        assert second["id"] == 2
        assert [u["id"] for u in await store.list()] == [1, 2]

    async def test_ids_are_not_reused_after_delete(self):
        store = InMemoryUserStore()
        first = await store.insert({"name": "Ada", "age": 30})
        await store.delete(first["id"])

        second = await store.insert({"name": "Grace", "age": 45})
        assert second["id"] == 2

    async def test_insert_drops_non_writable_keys(self):
        store = InMemoryUserStore()

        row = await store.insert({"name": "Ada", "age": 30, "is_admin": True, "id": 99})

        assert row["id"] == 1
        assert "is_admin" not in row

    async def test_insert_without_name_is_rejected(self):
        store = InMemoryUserStore()

        with pytest.raises(UserConstraintError):
            await store.insert({"age": 30})
        assert await store.list() == []

    async def test_get_by_id_missing_returns_none(self):
        assert await InMemoryUserStore().get_by_id(5) is None

    async def test_returned_rows_are_copies(self):
        store = InMemoryUserStore()
        row = await store.insert({"name": "Ada", "age": 30})

        row["name"] = "changed"
        assert (await store.get_by_id(1))["name"] == "Ada"

    async def test_update_is_partial(self):
        store = InMemoryUserStore()
        await store.insert({"name": "Ada", "age": 30})

        row = await store.update(1, {"age": 31})

        assert row["name"] == "Ada"
        assert row["age"] == 31
        assert row["updated_at"] >= row["created_at"]

    async def test_update_missing_returns_none(self):
        assert await InMemoryUserStore().update(3, {"age": 1}) is None

    async def test_update_to_null_name_is_rejected(self):
        store = InMemoryUserStore()
        await store.insert({"name": "Ada", "age": 30})

        with pytest.raises(UserConstraintError):
            await store.update(1, {"name": None})

    async def test_delete_reports_whether_a_row_was_removed(self):
        store = InMemoryUserStore()
        await store.insert({"name": "Ada", "age": 30})

        assert await store.delete(1) is True
        assert await store.delete(1) is False
        assert await store.get_by_id(1) is None


class _RecordingDb:
    def __init__(self, result=None, error: Exception | None = None):
        self.calls: list[tuple[str, tuple]] = []
        self.result = result
        self.error = error

    async def fetch_one(self, sql: str, *args):
        self.calls.append((sql, args))
        if self.error is not None:
            raise self.error
        return self.result

    async def fetch_all(self, sql: str, *args):
        self.calls.append((sql, args))
        return self.result


@pytest.fixture
def fake_db(monkeypatch):
    def _install(result=None, error: Exception | None = None) -> _RecordingDb:
        recorder = _RecordingDb(result=result, error=error)
        monkeypatch.setattr(db, "fetch_one", recorder.fetch_one)
        monkeypatch.setattr(db, "fetch_all", recorder.fetch_all)
        return recorder

    return _install


@pytest.mark.anyio
class TestPostgresUserStore:
    async def test_list_orders_by_id(self, fake_db):
        recorder = fake_db(result=[_row(1), _row(2)])

        rows = await PostgresUserStore().list()

        assert len(rows) == 2
        sql, args = recorder.calls[0]
        assert "ORDER BY id" in sql
        assert args == ()

    async def test_get_by_id_passes_id_as_parameter(self, fake_db):
        recorder = fake_db(result=None)

        assert await PostgresUserStore().get_by_id(7) is None
        sql, args = recorder.calls[0]
        assert "WHERE id = $1" in sql
        assert args == (7,)

    async def test_insert_only_sends_writable_columns(self, fake_db):
        recorder = fake_db(result=_row())

        row = await PostgresUserStore().insert({"name": "Ada", "age": 30, "is_admin": True})

        assert row["id"] == 1
        sql, args = recorder.calls[0]
        assert "INSERT INTO users (name, age)" in sql
        assert args == ("Ada", 30)

    async def test_insert_constraint_violation_is_translated(self, fake_db):
        fake_db(error=asyncpg.NotNullViolationError("null value in column \"name\""))

        with pytest.raises(UserConstraintError):
            await PostgresUserStore().insert({"age": 30})

    async def test_update_builds_set_clause_from_present_fields(self, fake_db):
        recorder = fake_db(result=_row(age=31))

        row = await PostgresUserStore().update(1, {"age": 31, "is_admin": True})

        assert row["age"] == 31
        sql, args = recorder.calls[0]
        assert "SET age = $2," in sql
        assert "name =" not in sql
        assert "updated_at = now()" in sql
        assert args == (1, 31)

    async def test_update_with_both_fields(self, fake_db):
        recorder = fake_db(result=_row(name="Ada L.", age=36))

        await PostgresUserStore().update(1, {"name": "Ada L.", "age": 36})

        sql, args = recorder.calls[0]
        assert "SET name = $2, age = $3," in sql
        assert args == (1, "Ada L.", 36)

    async def test_update_without_changes_reads_current_row(self, fake_db):
        recorder = fake_db(result=_row())

        await PostgresUserStore().update(1, {"is_admin": True})

        sql, args = recorder.calls[0]
        assert sql.strip().startswith("SELECT")
        assert args == (1,)

    async def test_update_missing_returns_none(self, fake_db):
        fake_db(result=None)
        assert await PostgresUserStore().update(9, {"age": 1}) is None

    async def test_delete_returns_false_when_nothing_matched(self, fake_db):
        recorder = fake_db(result=None)

        assert await PostgresUserStore().delete(9) is False
        sql, args = recorder.calls[0]
        assert "DELETE FROM users" in sql
        assert args == (9,)

    async def test_delete_returns_true_when_row_removed(self, fake_db):
        fake_db(result={"id": 9})
        assert await PostgresUserStore().delete(9) is True

    @pytest.mark.parametrize("user_id", [2**63, -(2**63) - 1, 10**20])
    async def test_ids_outside_bigint_are_missing_without_sql(self, fake_db, user_id):
        recorder = fake_db(result=_row())
        store = PostgresUserStore()

        assert await store.get_by_id(user_id) is None
        assert await store.update(user_id, {"age": 31}) is None
        assert await store.update(user_id, {}) is None
        assert await store.delete(user_id) is False
        assert recorder.calls == []

    async def test_largest_bigint_id_is_queried(self, fake_db):
        recorder = fake_db(result=None)

        assert await PostgresUserStore().get_by_id(2**63 - 1) is None
        assert recorder.calls[0][1] == (2**63 - 1,)


def test_writable_columns_are_the_allow_list():
    assert repository.WRITABLE_COLUMNS == ("name", "age")
