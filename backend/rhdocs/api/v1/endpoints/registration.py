from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from fastapi.responses import RedirectResponse

from rhdocs.core.dependencies import get_workspace, set_workspace_cookie
from rhdocs.models.registration import FieldUpdate, RegistrationFormState, StagedAttachment, SubmitResponse
from rhdocs.models.results import ErrorKind
from rhdocs.services.registration_form import (
    DIRECTORY_PATH,
    AttachmentError,
    is_allowed_attachment,
)
from rhdocs.services.workspaces import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registration", tags=["registration"])


def _redirect(workspace: Workspace) -> RedirectResponse | None:
    location = workspace.form.next_location()
    if location is None:
        return None
    # A returned response replaces the injected one, so the cookie goes here too.
    response = RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)
    set_workspace_cookie(response, workspace)
    return response


def _form_state(workspace: Workspace) -> RegistrationFormState:
    form = workspace.form
    return RegistrationFormState(
        fields=form.fields,
        attachments=form.attachments,
        submitting=form.submitting,
        positions=workspace.directory.positions,
        departments=workspace.directory.departments,
    )


@router.get("", response_model=RegistrationFormState)
async def get_form(workspace: Workspace = Depends(get_workspace)):  # noqa: B008
    redirect = _redirect(workspace)
    if redirect is not None:
        return redirect
    await workspace.directory.ensure_loaded()
    return _form_state(workspace)


@router.patch("", response_model=RegistrationFormState)
async def update_field(
    update: FieldUpdate,
    workspace: Workspace = Depends(get_workspace),  # noqa: B008
):
    redirect = _redirect(workspace)
    if redirect is not None:
        return redirect
    try:
        workspace.form.update_field(update.field, update.value)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown field: {update.field}",
        ) from e
    return _form_state(workspace)


@router.post("/attachments", response_model=list[StagedAttachment])
async def stage_attachments(
    files: list[UploadFile],
    workspace: Workspace = Depends(get_workspace),  # noqa: B008
):
    redirect = _redirect(workspace)
    if redirect is not None:
        return redirect

    rejected = [f.filename or "" for f in files if not is_allowed_attachment(f.filename or "")]
    if rejected:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {', '.join(rejected)}. Allowed: PDF, DOC, DOCX, JPG, JPEG, PNG",
        )

    for upload in files:
        file_bytes = await upload.read()
        try:
            workspace.form.stage(upload.filename or "", len(file_bytes), upload.content_type)
        except AttachmentError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info("Staged %d file(s) in workspace %s", len(files), workspace.id)
    return workspace.form.attachments


@router.delete("/attachments/{index}", response_model=list[StagedAttachment])
async def remove_attachment(
    index: int,
    workspace: Workspace = Depends(get_workspace),  # noqa: B008
):
    redirect = _redirect(workspace)
    if redirect is not None:
        return redirect
    try:
        workspace.form.remove_attachment(index)
    except IndexError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No staged attachment at position {index}",
        ) from e
    return workspace.form.attachments


@router.post("/submit", response_model=SubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_form(workspace: Workspace = Depends(get_workspace)):  # noqa: B008
    redirect = _redirect(workspace)
    if redirect is not None:
        return redirect

    result = await workspace.form.submit()
    if result.error is not None and result.error.kind == ErrorKind.VALIDATION:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=result.error.message,
        )
    if result.error is not None or result.employee is None:
        message = result.error.message if result.error else "no employee returned"
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to create employee: {message}",
        )

    return SubmitResponse(
        employee_id=result.employee.id,
        name=result.employee.name,
        next=workspace.form.next_location() or DIRECTORY_PATH,
    )
