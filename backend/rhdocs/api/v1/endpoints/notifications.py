from __future__ import annotations

from fastapi import APIRouter, Depends

from rhdocs.core.dependencies import get_workspace
from rhdocs.models.notification import Notification
from rhdocs.services.workspaces import Workspace

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
async def drain_notifications(workspace: Workspace = Depends(get_workspace)):  # noqa: B008
    return workspace.notifications.drain()
