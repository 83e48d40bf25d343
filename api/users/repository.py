"""
User persistence.

Handlers never reach for a global model class; they receive a `UserStore`
through `dependencies.get_user_store`. Lookups that miss return `None`
(or `False` for deletes) instead of raising, so the caller decides how a
missing record is reported.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import asyncpg

from core import db

logger = logging.getLogger(__name__)

WRITABLE_COLUMNS = ("name", "age")

_USER_COLUMNS = "id, name, age, created_at, updated_at"

# users.id is BIGSERIAL; asyncpg refuses to encode ints outside int64.
_ID_MIN = -(2**63)
_ID_MAX = 2**63 - 1


class UserConstraintError(RuntimeError):
    """The store rejected a write (NOT NULL, CHECK, range, ...)."""


class UserStore(Protocol):
    async def list(self) -> list[dict[str, Any]]: ...

    async def get_by_id(self, user_id: int) -> dict[str, Any] | None: ...

    async def insert(self, attrs: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, user_id: int, attrs: dict[str, Any]) -> dict[str, Any] | None: ...

    async def delete(self, user_id: int) -> bool: ...


def _writable(attrs: dict[str, Any]) -> dict[str, Any]:
    return {k: v for (k, v) in attrs.items() if k in WRITABLE_COLUMNS}


def _storable_id(user_id: int) -> bool:
    return _ID_MIN <= user_id <= _ID_MAX


class PostgresUserStore:
    """
    Raw SQL against the `users` table (see db/schema.sql).
    """

    async def list(self) -> list[dict[str, Any]]:
        return await db.fetch_all(
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            ORDER BY id
            """
        )

    async def get_by_id(self, user_id: int) -> dict[str, Any] | None:
        if not _storable_id(user_id):
            return None
        return await db.fetch_one(
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = $1
            """,
            user_id,
        )

    async def insert(self, attrs: dict[str, Any]) -> dict[str, Any]:
        values = _writable(attrs)
        try:
            row = await db.fetch_one(
                f"""
                INSERT INTO users (name, age)
                VALUES ($1, $2)
                RETURNING {_USER_COLUMNS}
                """,
                values.get("name"),
                values.get("age"),
            )
        except (asyncpg.IntegrityConstraintViolationError, asyncpg.DataError) as exc:
            raise UserConstraintError(str(exc)) from exc
        if row is None:
            raise RuntimeError("Failed to create user.")
        return row

    async def update(self, user_id: int, attrs: dict[str, Any]) -> dict[str, Any] | None:
        values = _writable(attrs)
        if not _storable_id(user_id):
            return None
        if not values:
            return await self.get_by_id(user_id)

        # Column names come from WRITABLE_COLUMNS only; values stay parameterized.
        columns = list(values)
        assignments = ", ".join(f"{column} = ${i}" for (i, column) in enumerate(columns, start=2))
        try:
            return await db.fetch_one(
                f"""
                UPDATE users
                SET {assignments},
                    updated_at = now()
                WHERE id = $1
                RETURNING {_USER_COLUMNS}
                """,
                user_id,
                *(values[column] for column in columns),
            )
        except (asyncpg.IntegrityConstraintViolationError, asyncpg.DataError) as exc:
            raise UserConstraintError(str(exc)) from exc

    async def delete(self, user_id: int) -> bool:
        if not _storable_id(user_id):
            return False
        row = await db.fetch_one(
            """
            DELETE FROM users
            WHERE id = $1
            RETURNING id
            """,
            user_id,
        )
        return row is not None


class InMemoryUserStore:
    """
    Process-local store. Ids are never reused within one instance.
    """

    def __init__(self) -> None:
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def list(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self._rows.values()]

    async def get_by_id(self, user_id: int) -> dict[str, Any] | None:
        row = self._rows.get(user_id)
        return dict(row) if row is not None else None

    async def insert(self, attrs: dict[str, Any]) -> dict[str, Any]:
        values = _writable(attrs)
        if values.get("name") is None:
            raise UserConstraintError('null value in column "name" violates not-null constraint')

        async with self._lock:
            now = datetime.now(timezone.utc)
            row = {
                "id": self._next_id,
                "name": values["name"],
                "age": values.get("age"),
                "created_at": now,
                "updated_at": now,
            }
            self._rows[self._next_id] = row
            self._next_id += 1
        return dict(row)

    async def update(self, user_id: int, attrs: dict[str, Any]) -> dict[str, Any] | None:
        values = _writable(attrs)
        if "name" in values and values["name"] is None:
            raise UserConstraintError('null value in column "name" violates not-null constraint')

        async with self._lock:
            row = self._rows.get(user_id)
            if row is None:
                return None
            if values:
                row.update(values)
                row["updated_at"] = datetime.now(timezone.utc)
            return dict(row)

    async def delete(self, user_id: int) -> bool:
        async with self._lock:
            return self._rows.pop(user_id, None) is not None
