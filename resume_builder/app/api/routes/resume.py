import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.orm import Session

from resume_builder.app.api.dependencies import get_templates, get_workspace, is_htmx
from resume_builder.app.api.routes.html_fragments import (
    render_notifications_html,
    render_preview_html,
    render_workspace_html,
)
from resume_builder.app.api.routes.route_logic.resume_export import (
    export_filename,
    render_resume_print_html,
)
from resume_builder.app.api.routes.route_logic.resume_preview import ResumePreview
from resume_builder.app.api.routes.route_logic.resume_workspace import ResumeWorkspace
from resume_builder.app.api.routes.route_logic.suggestions import pick_suggestion
from resume_builder.app.api.routes.route_models import (
    FieldUpdateRequest,
    ResumeStateResponse,
    SaveResponse,
    SkillKeyRequest,
    SkillValueRequest,
    SuggestionResponse,
)
from resume_builder.app.database.database import get_db
from resume_builder.app.models.resume.resume import ResumeSection
from resume_builder.app.models.resume.skills import SkillCategory
from resume_builder.app.models.resume.template import Template

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["resume"])


def _state(workspace: ResumeWorkspace) -> ResumeStateResponse:
    return ResumeStateResponse(
        document=workspace.document.model_dump(by_alias=True),
        template_id=workspace.template_id,
        completion=workspace.completion,
        skill_input=workspace.skill_input.as_dict(),
        is_saving=workspace.is_saving,
        notifications=workspace.notifications.drain(),
    )


def _edit_response(
    request: Request,
    workspace: ResumeWorkspace,
    templates: list[Template],
    layout_changed: bool,
) -> Response | ResumeStateResponse:
    """Respond to an edit.

    HTMX gets the whole workspace when the form layout changed (entries or
    skills added or removed), otherwise only the preview so inputs keep focus.
    API clients get the workspace state.
    """
    if not is_htmx(request):
        return _state(workspace)
    if layout_changed:
        return HTMLResponse(render_workspace_html(workspace, templates))
    return HTMLResponse(render_preview_html(workspace, templates))


def _unprocessable(e: ValueError) -> HTTPException:
    _msg = f"Rejected resume edit: {e}"
    log.warning(_msg)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("")
async def get_resume_state(
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
) -> ResumeStateResponse:
    """Return the live resume, its completion score and pending messages."""
    return _state(workspace)


@router.put("/personal", response_model=None)
async def update_personal_details(
    request: Request,
    payload: FieldUpdateRequest,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumeStateResponse:
    """Set one personal details field.

    Raises:
        HTTPException: 422 if the field does not exist.

    """
    try:
        workspace.update_personal(payload.field, payload.value)
    except ValueError as e:
        raise _unprocessable(e)
    return _edit_response(request, workspace, templates, layout_changed=False)


@router.post("/{section}/entries", status_code=status.HTTP_201_CREATED, response_model=None)
async def add_entry(
    request: Request,
    section: ResumeSection,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response:
    """Append an empty entry to a list section.

    Args:
        request (Request): The incoming request.
        section (ResumeSection): 'education', 'experience' or 'projects'.
        workspace (ResumeWorkspace): The account's workspace.
        templates (list[Template]): The template catalog.

    Returns:
        Response: The re-rendered workspace (HTMX) or the new entry, with status 201.

    Raises:
        HTTPException: 422 if the section is not a list section.

    """
    try:
        entry = workspace.add_entry(section)
    except ValueError as e:
        raise _unprocessable(e)

    if is_htmx(request):
        return HTMLResponse(
            render_workspace_html(workspace, templates),
            status_code=status.HTTP_201_CREATED,
        )
    return JSONResponse(
        content=entry.model_dump(by_alias=True),
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/{section}/entries/{entry_id}", response_model=None)
async def update_entry(
    request: Request,
    section: ResumeSection,
    entry_id: str,
    payload: FieldUpdateRequest,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumeStateResponse:
    """Set one field of an entry; an unknown entry id changes nothing.

    Raises:
        HTTPException: 422 for an unknown section or field, or an attempt to change the id.

    """
    try:
        workspace.update_entry(section, entry_id, payload.field, payload.value)
    except ValueError as e:
        raise _unprocessable(e)
    return _edit_response(request, workspace, templates, layout_changed=False)


@router.delete("/{section}/entries/{entry_id}", response_model=None)
async def remove_entry(
    request: Request,
    section: ResumeSection,
    entry_id: str,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumeStateResponse:
    """Remove an entry; an unknown entry id changes nothing."""
    try:
        workspace.remove_entry(section, entry_id)
    except ValueError as e:
        raise _unprocessable(e)
    return _edit_response(request, workspace, templates, layout_changed=True)


@router.put("/skills/{category}/input", status_code=status.HTTP_204_NO_CONTENT)
async def set_skill_input(
    category: SkillCategory,
    payload: SkillValueRequest,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
) -> Response:
    """Buffer the text typed in a skill input without adding it."""
    workspace.set_skill_input(category, payload.value)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/skills/{category}", response_model=None)
async def commit_skill(
    request: Request,
    category: SkillCategory,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
    payload: SkillValueRequest | None = None,
) -> Response | ResumeStateResponse:
    """Add the buffered skill text to a category.

    Notes:
        1. A `value` in the body replaces the buffered text first.
        2. A blank or duplicate skill is not added and the buffer keeps its text.

    """
    if payload is not None:
        workspace.set_skill_input(category, payload.value)
    workspace.commit_skill(category)
    return _edit_response(request, workspace, templates, layout_changed=True)


@router.post("/skills/{category}/key", response_model=None)
async def skill_key(
    request: Request,
    category: SkillCategory,
    payload: SkillKeyRequest,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumeStateResponse:
    """Handle a key pressed in a skill input; Enter adds the buffered skill."""
    if payload.value is not None:
        workspace.set_skill_input(category, payload.value)
    workspace.handle_skill_key(category, payload.key)
    return _edit_response(request, workspace, templates, layout_changed=True)


@router.delete("/skills/{category}/{skill:path}", response_model=None)
async def remove_skill(
    request: Request,
    category: SkillCategory,
    skill: str,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumeStateResponse:
    """Remove a skill from a category."""
    workspace.remove_skill(category, skill)
    return _edit_response(request, workspace, templates, layout_changed=True)


@router.post("/save", response_model=None)
async def save_resume(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
) -> Response:
    """Store the live resume.

    Returns:
        Response: Notifications (HTMX) or a SaveResponse. JSON clients get 503
            when the save failed; the unsaved edits stay in the workspace.

    """
    saved = workspace.save(db)
    notifications = workspace.notifications.drain()
    if is_htmx(request):
        return HTMLResponse(render_notifications_html(notifications))
    return JSONResponse(
        content=SaveResponse(saved=saved, notifications=notifications).model_dump(
            by_alias=True,
            mode="json",
        ),
        status_code=status.HTTP_200_OK if saved else status.HTTP_503_SERVICE_UNAVAILABLE,
    )


@router.get("/preview", response_model=None)
async def get_preview(
    request: Request,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | ResumePreview:
    """Return the rendered preview of the live resume."""
    if is_htmx(request):
        return HTMLResponse(render_preview_html(workspace, templates))
    return workspace.preview(templates)


@router.get("/export")
async def export_resume(
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> HTMLResponse:
    """Return a standalone, printable document that opens the print dialog.

    Notes:
        1. Exports the live document, including edits not yet saved.
        2. No file is written; the browser prints or saves as PDF.

    """
    preview = workspace.preview(templates)
    filename = export_filename(preview)
    return HTMLResponse(
        render_resume_print_html(preview),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.get("/suggestion", response_model=None)
async def get_suggestion(
    request: Request,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
) -> Response | SuggestionResponse:
    """Return a resume-writing tip (HTMX: as a notification)."""
    suggestion = pick_suggestion()
    if is_htmx(request):
        workspace.notifications.notify("Suggestion", suggestion)
        return HTMLResponse(render_notifications_html(workspace.notifications.drain()))
    return SuggestionResponse(suggestion=suggestion)
