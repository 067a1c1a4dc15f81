from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, Response, status

from rhdocs.core.config import settings
from rhdocs.models.auth import AuthUser
from rhdocs.services.backend_client import BackendClient
from rhdocs.services.employee_directory import EmployeeDirectory
from rhdocs.services.workspaces import Workspace, WorkspaceRegistry

logger = logging.getLogger(__name__)


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def set_workspace_cookie(response: Response, workspace: Workspace) -> None:
    response.set_cookie(
        settings.WORKSPACE_COOKIE,
        workspace.id,
        max_age=settings.WORKSPACE_IDLE_SECONDS,
        httponly=True,
        samesite="lax",
    )


async def get_workspace(request: Request, response: Response) -> Workspace:
    registry: WorkspaceRegistry = request.app.state.workspaces
    workspace_id = request.cookies.get(settings.WORKSPACE_COOKIE)
    workspace = await registry.acquire(workspace_id)
    if workspace.id != workspace_id:
        set_workspace_cookie(response, workspace)
    return workspace


async def get_current_user(workspace: Workspace = Depends(get_workspace)) -> AuthUser:  # noqa: B008
    user = await workspace.session.current_user()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


async def get_directory(
    workspace: Workspace = Depends(get_workspace),  # noqa: B008
    user: AuthUser = Depends(get_current_user),  # noqa: B008
) -> EmployeeDirectory:
    await workspace.directory.ensure_loaded()
    return workspace.directory


def require_role(*roles: str):
    async def _check_role(user: AuthUser = Depends(get_current_user)) -> AuthUser:  # noqa: B008
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(roles)}",
            )
        return user

    return _check_role
