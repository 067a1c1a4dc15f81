"""Registration form controller: field state, input masks, staged attachments, submission."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import date
from decimal import Decimal, InvalidOperation

from rhdocs.core.masks import format_cpf, format_phone
from rhdocs.models.employee import EmployeeDraft
from rhdocs.models.registration import RegistrationFields, StagedAttachment
from rhdocs.models.results import CreateResult, ErrorInfo, ErrorKind
from rhdocs.services.employee_directory import EmployeeDirectory
from rhdocs.services.notifications import NotificationCenter
from rhdocs.services.session_store import SessionStore

logger = logging.getLogger(__name__)

DIRECTORY_PATH = "/api/v1/employees"

REQUIRED_FIELDS = ("name", "cpf", "registration")

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png"}

_FIELD_FORMATTERS: dict[str, Callable[[str], str]] = {
    "cpf": format_cpf,
    "phone": format_phone,
    "registration": str.upper,
}


class AttachmentError(ValueError):
    pass


def is_allowed_attachment(filename: str) -> bool:
    return os.path.splitext(filename)[1].lower() in ALLOWED_EXTENSIONS


def _optional(value: str) -> str | None:
    value = value.strip()
    return value or None


def _parse_date(value: str) -> date | None:
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring malformed admission date %r", value)
        return None


def _parse_salary(value: str) -> Decimal | None:
    value = value.strip()
    if not value:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        logger.warning("Ignoring malformed salary %r", value)
        return None


class RegistrationForm:
    def __init__(self, directory: EmployeeDirectory, notifications: NotificationCenter) -> None:
        self.directory = directory
        self.notifications = notifications
        self.fields = RegistrationFields()
        self.attachments: list[StagedAttachment] = []
        self.submitting = False
        self.access_denied = False
        self._pending_navigation: str | None = None

    def bind(self, session: SessionStore) -> Callable[[], None]:
        """Watch ``session`` and deny access to anyone without the privileged role."""
        dispose = session.subscribe(self._on_session_change)
        self._on_session_change(session)
        return dispose

    def next_location(self) -> str | None:
        if self.access_denied:
            return DIRECTORY_PATH
        location, self._pending_navigation = self._pending_navigation, None
        return location

    def update_field(self, field: str, value: str) -> RegistrationFields:
        if field not in RegistrationFields.model_fields:
            raise KeyError(field)
        formatter = _FIELD_FORMATTERS.get(field)
        setattr(self.fields, field, formatter(value) if formatter else value)
        return self.fields

    def stage(self, filename: str, size_bytes: int, content_type: str | None = None) -> StagedAttachment:
        if not is_allowed_attachment(filename):
            raise AttachmentError(
                f"Unsupported file type: {filename}. Allowed: PDF, DOC, DOCX, JPG, JPEG, PNG"
            )
        attachment = StagedAttachment(filename=filename, size_bytes=size_bytes, content_type=content_type)
        self.attachments.append(attachment)
        return attachment

    def remove_attachment(self, index: int) -> StagedAttachment:
        if not 0 <= index < len(self.attachments):
            raise IndexError(index)
        return self.attachments.pop(index)

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self.fields, name).strip()]

    def reset(self) -> None:
        self.fields = RegistrationFields()
        self.attachments = []

    def to_draft(self) -> EmployeeDraft:
        fields = self.fields
        return EmployeeDraft(
            name=fields.name,
            cpf=fields.cpf,
            registration=fields.registration,
            position_id=_optional(fields.position_id),
            department_id=_optional(fields.department_id),
            hire_date=_parse_date(fields.admission_date),
            email=_optional(fields.email),
            phone=_optional(fields.phone),
            address=_optional(fields.address),
            salary=_parse_salary(fields.salary),
            notes=_optional(fields.observations),
        )

    async def submit(self) -> CreateResult:
        missing = self.missing_fields()
        if missing:
            message = "Preencha todos os campos obrigatórios"
            self.notifications.error("Erro no cadastro", message)
            logger.info("Registration rejected, missing fields: %s", ", ".join(missing))
            return CreateResult(error=ErrorInfo(kind=ErrorKind.VALIDATION, message=message))

        self.submitting = True
        try:
            result = await self.directory.create(self.to_draft())
        finally:
            self.submitting = False

        if result.employee is not None:
            if self.attachments:
                # Staged only; nothing is uploaded to storage yet.
                logger.info(
                    "Discarding %d staged attachment(s) for employee %s",
                    len(self.attachments),
                    result.employee.id,
                )
            self.reset()
            self._pending_navigation = DIRECTORY_PATH
        return result

    def _on_session_change(self, session: SessionStore) -> None:
        if session.loading:
            return
        self.access_denied = not session.is_privileged_role
