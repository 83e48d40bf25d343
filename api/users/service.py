"""
Users business logic.

Records arrive already loaded (see `dependencies.py`); this module applies
the write, maps store failures to HTTP errors and shapes responses.
"""

from __future__ import annotations

import logging
import random

from fastapi import HTTPException, status

from . import schemas
from .dependencies import NOT_FOUND_DETAIL
from .repository import UserConstraintError, UserStore

logger = logging.getLogger(__name__)

CUSTOM_RESPONSE = "this is a custom response"
EMPTY_COLLECTION_DETAIL = "No users available."


def to_user_response(row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(row["id"]),
        name=str(row["name"]),
        age=int(row["age"]) if row.get("age") is not None else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)


def _unprocessable(exc: UserConstraintError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


def list_users(users: list[dict]) -> list[schemas.UserResponse]:
    return [to_user_response(row) for row in users]


async def create_user(store: UserStore, params: schemas.UserCreate) -> schemas.UserResponse:
    try:
        row = await store.insert(params.model_dump())
    except UserConstraintError as exc:
        logger.warning("user_create_rejected reason=%s", exc)
        raise _unprocessable(exc) from exc

    logger.info("user_created id=%s", row["id"])
    return to_user_response(row)


async def update_user(store: UserStore, user: dict, params: schemas.UserUpdate) -> schemas.UserResponse:
    changes = params.changes()
    try:
        row = await store.update(int(user["id"]), changes)
    except UserConstraintError as exc:
        logger.warning("user_update_rejected id=%s reason=%s", user["id"], exc)
        raise _unprocessable(exc) from exc

    # Deleted between load and write.
    if row is None:
        raise _not_found()

    logger.info("user_updated id=%s fields=%s", row["id"], ",".join(sorted(changes)) or "-")
    return to_user_response(row)


async def destroy_user(store: UserStore, user: dict) -> None:
    deleted = await store.delete(int(user["id"]))
    if not deleted:
        raise _not_found()
    logger.info("user_deleted id=%s", user["id"])


def easter_egg() -> str:
    return CUSTOM_RESPONSE


def pick_random_user(users: list[dict], *, rng: random.Random | None = None) -> schemas.UserResponse:
    """
    Uniform pick over the whole collection. Not seeded, not cryptographic.
    """
    if not users:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EMPTY_COLLECTION_DETAIL)

    index = (rng or random).randrange(len(users))
    return to_user_response(users[index])
