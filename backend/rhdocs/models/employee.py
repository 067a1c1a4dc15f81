"""Employee directory models as stored by the hosted backend."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Position(BaseModel):
    id: str
    title: str
    description: str | None = None
    created_at: datetime | None = None


class Department(BaseModel):
    id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None


class EmployeeDraft(BaseModel):
    """A new employee record awaiting insertion; the backend assigns id and timestamps."""

    name: str = Field(min_length=1)
    cpf: str = Field(min_length=1)
    registration: str = Field(min_length=1)
    position_id: str | None = None
    department_id: str | None = None
    hire_date: date | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    documents: list[str] = Field(default_factory=list)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    salary: Decimal | None = None
    notes: str | None = None

    @field_validator("name", "cpf", "registration")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class Employee(BaseModel):
    id: str
    name: str
    cpf: str
    registration: str
    position_id: str | None = None
    department_id: str | None = None
    hire_date: date | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    documents: list[str] = Field(default_factory=list)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    salary: Decimal | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("documents", mode="before")
    @classmethod
    def _documents_default(cls, value: Any) -> Any:
        return [] if value is None else value


class EmployeeSummary(BaseModel):
    """Minimal employee info for the dashboard list."""

    id: str
    name: str
    cpf: str
    registration: str
    position: str
    department: str
    status: EmployeeStatus
    document_count: int


class EmployeeProfile(EmployeeSummary):
    """Full employee details for the profile page."""

    hire_date: date | None = None
    years_of_service: str = "N/A"
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    documents: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DirectoryStats(BaseModel):
    active: int
    inactive: int
    documents: int


class EmployeeListResponse(BaseModel):
    total: int
    employees: list[EmployeeSummary]
    stats: DirectoryStats
