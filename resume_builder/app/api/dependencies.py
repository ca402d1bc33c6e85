import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from resume_builder.app.api.routes.route_logic.auth_provider import (
    AuthProvider,
    DatabaseAuthProvider,
)
from resume_builder.app.api.routes.route_logic.resume_workspace import (
    ResumeWorkspace,
    WorkspaceRegistry,
    get_workspace_registry,
)
from resume_builder.app.api.routes.route_logic.template_catalog import list_templates
from resume_builder.app.core.auth import AuthSession, get_auth_session
from resume_builder.app.core.config import Settings, get_settings
from resume_builder.app.database.database import get_db
from resume_builder.app.models.resume.template import Template

log = logging.getLogger(__name__)


def is_htmx(request: Request) -> bool:
    """Return True when the request was issued by HTMX."""
    return "hx-request" in request.headers


def get_auth_provider(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthProvider:
    """Dependency providing the account operations for this request."""
    return DatabaseAuthProvider(db=db, settings=settings)


async def get_workspace(
    session: Annotated[AuthSession, Depends(get_auth_session)],
    db: Annotated[Session, Depends(get_db)],
    registry: Annotated[WorkspaceRegistry, Depends(get_workspace_registry)],
) -> ResumeWorkspace:
    """
    Dependency to get the live resume workspace of the current user.

    Args:
        session (AuthSession): The signed-in account.
        db (Session): The database session dependency.
        registry (WorkspaceRegistry): The open workspaces.

    Returns:
        ResumeWorkspace: The account's workspace, loaded from storage on first use.

    Raises:
        HTTPException: Through `get_auth_session` when the request is not authenticated.

    """
    return registry.open(session, db)


def get_templates(db: Annotated[Session, Depends(get_db)]) -> list[Template]:
    """Dependency providing the template catalog; falls back to the built-in set."""
    return list_templates(db)
