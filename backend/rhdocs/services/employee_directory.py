"""Employee directory: cached employees plus position/department reference data."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any

from pydantic import ValidationError

from rhdocs.models.employee import (
    Department,
    DirectoryStats,
    Employee,
    EmployeeDraft,
    EmployeeProfile,
    EmployeeStatus,
    EmployeeSummary,
    Position,
)
from rhdocs.models.results import CreateResult, ErrorInfo, ErrorKind
from rhdocs.services.backend_client import BackendError, BackendScope
from rhdocs.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)

EMPLOYEES_TABLE = "employees"
POSITIONS_TABLE = "positions"
DEPARTMENTS_TABLE = "departments"


def _calculate_years_of_service(hire_date: date | None, today: date | None = None) -> str:
    if hire_date is None:
        return "N/A"
    today = today or date.today()
    if hire_date > today:
        return "0"
    return str(int((today - hire_date).days / 365.25))


class EmployeeDirectory:
    def __init__(self, backend: BackendScope, notifications: NotificationCenter) -> None:
        self.backend = backend
        self.notifications = notifications
        self.employees: list[Employee] = []
        self.positions: list[Position] = []
        self.departments: list[Department] = []
        self.loading = True
        self.loaded = False

    async def load_all(self) -> None:
        self.loading = True
        await asyncio.gather(
            self.fetch_employees(),
            self._fetch_positions(),
            self._fetch_departments(),
        )
        self.loading = False
        self.loaded = True

    async def ensure_loaded(self) -> None:
        if not self.loaded:
            await self.load_all()

    async def fetch_employees(self) -> None:
        try:
            rows = await self.backend.select(EMPLOYEES_TABLE, order="name")
            self.employees = [Employee.model_validate(row) for row in rows]
        except (BackendError, ValidationError) as e:
            self.notifications.error("Erro ao carregar funcionários", _describe(e))

    refresh = fetch_employees

    async def _fetch_positions(self) -> None:
        try:
            rows = await self.backend.select(POSITIONS_TABLE, order="title")
            self.positions = [Position.model_validate(row) for row in rows]
        except (BackendError, ValidationError):
            logger.exception("Error fetching positions")

    async def _fetch_departments(self) -> None:
        try:
            rows = await self.backend.select(DEPARTMENTS_TABLE, order="name")
            self.departments = [Department.model_validate(row) for row in rows]
        except (BackendError, ValidationError):
            logger.exception("Error fetching departments")

    async def create(self, draft: EmployeeDraft) -> CreateResult:
        try:
            row = await self.backend.insert(EMPLOYEES_TABLE, draft.model_dump(mode="json", exclude_none=True))
            employee = Employee.model_validate(row)
        except (BackendError, ValidationError) as e:
            self.notifications.error("Erro ao cadastrar funcionário", _describe(e))
            return CreateResult(
                error=ErrorInfo(
                    kind=ErrorKind.CREATE,
                    message=_describe(e),
                    status=e.status if isinstance(e, BackendError) else None,
                )
            )

        self.notifications.success("Funcionário cadastrado", f"{draft.name} foi cadastrado com sucesso")
        await self.fetch_employees()
        return CreateResult(employee=employee)

    def search(self, term: str) -> list[Employee]:
        if not term.strip():
            return list(self.employees)

        needle = term.lower()
        return [
            employee
            for employee in self.employees
            if any(needle in value.lower() for value in self._searchable_values(employee))
        ]

    def get(self, employee_id: str) -> Employee | None:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    def position_label(self, employee: Employee) -> str:
        for position in self.positions:
            if position.id == employee.position_id:
                return position.title
        return ""

    def department_label(self, employee: Employee) -> str:
        for department in self.departments:
            if department.id == employee.department_id:
                return department.name
        return ""

    def stats(self) -> DirectoryStats:
        return DirectoryStats(
            active=sum(1 for e in self.employees if e.status == EmployeeStatus.ACTIVE),
            inactive=sum(1 for e in self.employees if e.status == EmployeeStatus.INACTIVE),
            documents=sum(len(e.documents) for e in self.employees),
        )

    def summarize(self, employee: Employee) -> EmployeeSummary:
        return EmployeeSummary(**self._summary_fields(employee))

    def profile(self, employee: Employee) -> EmployeeProfile:
        return EmployeeProfile(
            **self._summary_fields(employee),
            hire_date=employee.hire_date,
            years_of_service=_calculate_years_of_service(employee.hire_date),
            email=employee.email,
            phone=employee.phone,
            address=employee.address,
            notes=employee.notes,
            documents=list(employee.documents),
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )

    def reset(self) -> None:
        self.employees = []
        self.positions = []
        self.departments = []
        self.loading = True
        self.loaded = False

    def _searchable_values(self, employee: Employee) -> tuple[str, ...]:
        return (
            employee.name,
            employee.cpf,
            employee.registration,
            self.position_label(employee),
            self.department_label(employee),
        )

    def _summary_fields(self, employee: Employee) -> dict[str, Any]:
        return {
            "id": employee.id,
            "name": employee.name,
            "cpf": employee.cpf,
            "registration": employee.registration,
            "position": self.position_label(employee),
            "department": self.department_label(employee),
            "status": employee.status,
            "document_count": len(employee.documents),
        }


def _describe(error: Exception) -> str:
    if isinstance(error, BackendError):
        return error.message
    return str(error)
