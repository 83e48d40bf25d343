"""
Users API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from . import schemas, service
from .dependencies import (
    get_user_store,
    load_user,
    load_users,
    user_create_params,
    user_update_params,
)
from .repository import UserStore

router = APIRouter()


@router.get("/users")
async def index(users: list[dict] = Depends(load_users)) -> list[schemas.UserResponse]:
    return service.list_users(users)


@router.get("/users/{user_id}")
async def show(user: dict = Depends(load_user)) -> schemas.UserResponse:
    return service.to_user_response(user)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create(
    params: schemas.UserCreate = Depends(user_create_params),
    store: UserStore = Depends(get_user_store),
) -> schemas.UserResponse:
    return await service.create_user(store, params)


@router.api_route("/users/{user_id}", methods=["PUT", "PATCH"])
async def update(
    user: dict = Depends(load_user),
    params: schemas.UserUpdate = Depends(user_update_params),
    store: UserStore = Depends(get_user_store),
) -> schemas.UserResponse:
    return await service.update_user(store, user, params)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def destroy(
    user: dict = Depends(load_user),
    store: UserStore = Depends(get_user_store),
) -> Response:
    await service.destroy_user(store, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/our-custom-route")
async def easter_egg() -> str:
    return service.easter_egg()


@router.get("/random-user")
async def friend_request(users: list[dict] = Depends(load_users)) -> schemas.UserResponse:
    return service.pick_random_user(users)
