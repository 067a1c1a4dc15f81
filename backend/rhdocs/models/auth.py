"""Authentication models mirroring the hosted auth provider's payloads."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthUser(BaseModel):
    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def role(self) -> str | None:
        role = self.user_metadata.get("role")
        return str(role) if role is not None else None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user: AuthUser

    @property
    def expired(self) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= int(time.time())


class LoginRequest(BaseModel):
    email: str
    password: str


class UserInfo(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: str | None = None
    role_label: str


class SessionResponse(BaseModel):
    user: UserInfo | None = None
    loading: bool
    is_hr_manager: bool
