import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse

from resume_builder.app.api.dependencies import get_templates, get_workspace, is_htmx
from resume_builder.app.api.routes.html_fragments import (
    render_templates_html,
    render_workspace_html,
)
from resume_builder.app.api.routes.route_logic.resume_workspace import ResumeWorkspace
from resume_builder.app.api.routes.route_logic.template_catalog import (
    TemplateNotFoundError,
)
from resume_builder.app.api.routes.route_models import TemplateSelectRequest
from resume_builder.app.models.resume.template import Template, TemplateSelection

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=None)
async def list_available_templates(
    request: Request,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | list[Template]:
    """List the templates, or render the picker for HTMX."""
    if is_htmx(request):
        return HTMLResponse(render_templates_html(templates, workspace.template_id))
    return templates


@router.post("/select", response_model=None)
async def choose_template(
    request: Request,
    payload: TemplateSelectRequest,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    templates: Annotated[list[Template], Depends(get_templates)],
) -> Response | TemplateSelection:
    """Select the template used by the preview and export.

    Args:
        request (Request): The incoming request.
        payload (TemplateSelectRequest): The chosen template id.
        workspace (ResumeWorkspace): The account's workspace.
        templates (list[Template]): The template catalog.

    Returns:
        Response | TemplateSelection: The re-rendered workspace (HTMX) or the
            chosen id with its style metadata.

    Raises:
        HTTPException: 404 if the template does not exist.

    Notes:
        1. The choice is stored with the resume on the next save.

    """
    try:
        selection = workspace.select_template(templates, payload.template_id)
    except TemplateNotFoundError as e:
        _msg = f"Template selection rejected: {e}"
        log.warning(_msg)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    if is_htmx(request):
        return HTMLResponse(render_workspace_html(workspace, templates))
    return selection
