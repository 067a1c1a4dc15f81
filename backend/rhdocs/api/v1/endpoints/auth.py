from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from rhdocs.core.dependencies import get_workspace
from rhdocs.models.auth import LoginRequest, SessionResponse, UserInfo
from rhdocs.services.session_store import SessionStore
from rhdocs.services.workspaces import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(session: SessionStore) -> SessionResponse:
    user = None
    if session.user is not None:
        user = UserInfo(
            id=session.user.id,
            email=session.user.email,
            name=session.display_name,
            role=session.user.role,
            role_label=session.role_label,
        )
    return SessionResponse(
        user=user,
        loading=session.loading,
        is_hr_manager=session.is_privileged_role,
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    workspace: Workspace = Depends(get_workspace),  # noqa: B008
):
    result = await workspace.session.sign_in(request.email, request.password)
    if result.error is not None:
        logger.info("Login failed for %s: %s", request.email, result.error.message)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error.message,
        )
    return _session_response(workspace.session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(workspace: Workspace = Depends(get_workspace)):  # noqa: B008
    error = await workspace.session.sign_out()
    if error is not None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Sign-out failed: {error.message}",
        )


@router.get("/session", response_model=SessionResponse)
async def current_session(workspace: Workspace = Depends(get_workspace)):  # noqa: B008
    return _session_response(workspace.session)
