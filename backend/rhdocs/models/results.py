"""Structured outcomes returned by the stores instead of raising."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from rhdocs.models.auth import AuthUser
from rhdocs.models.employee import Employee


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    FETCH = "fetch"
    CREATE = "create"


class ErrorInfo(BaseModel):
    kind: ErrorKind
    message: str
    status: int | None = None


class SignInResult(BaseModel):
    user: AuthUser | None = None
    error: ErrorInfo | None = None


class CreateResult(BaseModel):
    employee: Employee | None = None
    error: ErrorInfo | None = None
