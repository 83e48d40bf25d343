"""
Request preprocessing for the users routes.

Each handler declares what it needs (the store, the addressed record, the
whole collection, or the allow-listed body) instead of relying on filters
that populate shared request state.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from core import settings

from . import schemas
from .repository import InMemoryUserStore, PostgresUserStore, UserStore

logger = logging.getLogger(__name__)

PARAM_KEY = "user"
MISSING_PARAM_DETAIL = f"param is missing or the value is empty: {PARAM_KEY}"
NOT_FOUND_DETAIL = "User not found."


@lru_cache(maxsize=1)
def _configured_store() -> UserStore:
    backend = settings.users_store()
    logger.info("users_store backend=%s", backend)
    if backend == settings.STORE_MEMORY:
        return InMemoryUserStore()
    return PostgresUserStore()


def get_user_store() -> UserStore:
    return _configured_store()


async def load_user(user_id: int, store: UserStore = Depends(get_user_store)) -> dict:
    user = await store.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return user


async def load_users(store: UserStore = Depends(get_user_store)) -> list[dict]:
    return await store.list()


def _require_param(payload: Any) -> dict:
    value = payload.get(PARAM_KEY) if isinstance(payload, dict) else None
    if not isinstance(value, dict) or not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_PARAM_DETAIL)
    return value


def _permit(model: type[BaseModel], raw: dict) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        errors = [{**err, "loc": ("body", PARAM_KEY, *err["loc"])} for err in exc.errors(include_url=False)]
        raise RequestValidationError(errors, body={PARAM_KEY: raw}) from exc


async def user_create_params(payload: Any = Body(default=None)) -> schemas.UserCreate:
    return _permit(schemas.UserCreate, _require_param(payload))


async def user_update_params(payload: Any = Body(default=None)) -> schemas.UserUpdate:
    return _permit(schemas.UserUpdate, _require_param(payload))
