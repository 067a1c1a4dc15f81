"""Registration form models."""

from __future__ import annotations

from pydantic import BaseModel, computed_field

from rhdocs.models.employee import Department, Position


class RegistrationFields(BaseModel):
    name: str = ""
    cpf: str = ""
    registration: str = ""
    position_id: str = ""
    department_id: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    admission_date: str = ""
    salary: str = ""
    observations: str = ""


class StagedAttachment(BaseModel):
    filename: str
    size_bytes: int
    content_type: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size_label(self) -> str:
        return f"{self.size_bytes / 1024 / 1024:.2f} MB"


class FieldUpdate(BaseModel):
    field: str
    value: str


class RegistrationFormState(BaseModel):
    fields: RegistrationFields
    attachments: list[StagedAttachment]
    submitting: bool
    positions: list[Position]
    departments: list[Department]


class SubmitResponse(BaseModel):
    employee_id: str
    name: str
    next: str
