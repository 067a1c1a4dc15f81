from __future__ import annotations

from fastapi import APIRouter, Depends

from rhdocs.core.dependencies import get_directory
from rhdocs.models.employee import Department, Position
from rhdocs.services.employee_directory import EmployeeDirectory

router = APIRouter(tags=["reference"])


@router.get("/positions", response_model=list[Position])
async def list_positions(directory: EmployeeDirectory = Depends(get_directory)):  # noqa: B008
    return directory.positions


@router.get("/departments", response_model=list[Department])
async def list_departments(directory: EmployeeDirectory = Depends(get_directory)):  # noqa: B008
    return directory.departments
