"""
Users API schemas (request/response models).

The write models are the allow-list: only `name` and `age` survive parsing,
every other key in the submitted `user` object is dropped.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LENGTH = 200
AGE_MAX = 150


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    # strict: JSON booleans and numeric strings are not ages.
    age: int = Field(..., ge=0, le=AGE_MAX, strict=True)


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    age: int | None = Field(default=None, ge=0, le=AGE_MAX, strict=True)

    def changes(self) -> dict:
        # Omitted and explicit-null fields are left untouched.
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserResponse(BaseModel):
    id: int
    name: str
    age: int | None
    created_at: datetime
    updated_at: datetime
