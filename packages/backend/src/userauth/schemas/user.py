"""Request/response schemas for the user endpoints.

UserRead is the only shape a user ever leaves the service in. It has
no password_hash field, so the hash cannot leak through serialization.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    name: str
    password: str


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    result: UserRead


class UserListResponse(BaseModel):
    result: list[UserRead]


class LoginResponse(BaseModel):
    token: str
    result: UserRead
