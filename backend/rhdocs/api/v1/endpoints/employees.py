from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from rhdocs.core.config import settings
from rhdocs.core.dependencies import get_directory, require_role
from rhdocs.models.auth import AuthUser
from rhdocs.models.employee import Employee, EmployeeDraft, EmployeeListResponse, EmployeeProfile
from rhdocs.services.employee_directory import EmployeeDirectory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    q: str = "",
    directory: EmployeeDirectory = Depends(get_directory),  # noqa: B008
):
    matches = directory.search(q)
    return EmployeeListResponse(
        total=len(matches),
        employees=[directory.summarize(employee) for employee in matches],
        stats=directory.stats(),
    )


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    draft: EmployeeDraft,
    directory: EmployeeDirectory = Depends(get_directory),  # noqa: B008
    user: AuthUser = Depends(require_role(settings.PRIVILEGED_ROLE)),  # noqa: B008
):
    result = await directory.create(draft)
    if result.employee is None:
        message = result.error.message if result.error else "unknown error"
        logger.error("Create employee failed for user=%s: %s", user.email, message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to create employee: {message}",
        )
    return result.employee


@router.post("/refresh", response_model=EmployeeListResponse)
async def refresh_employees(directory: EmployeeDirectory = Depends(get_directory)):  # noqa: B008
    await directory.refresh()
    return EmployeeListResponse(
        total=len(directory.employees),
        employees=[directory.summarize(employee) for employee in directory.employees],
        stats=directory.stats(),
    )


@router.get("/{employee_id}", response_model=EmployeeProfile)
async def get_employee(
    employee_id: str,
    directory: EmployeeDirectory = Depends(get_directory),  # noqa: B008
):
    employee = directory.get(employee_id)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee '{employee_id}' not found",
        )
    return directory.profile(employee)
