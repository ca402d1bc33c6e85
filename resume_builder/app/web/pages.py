import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from resume_builder.app.api.dependencies import get_templates, get_workspace
from resume_builder.app.api.routes.html_fragments import builder_context
from resume_builder.app.api.routes.route_logic.auth_flow import ResendCooldown
from resume_builder.app.api.routes.route_logic.resume_workspace import ResumeWorkspace
from resume_builder.app.core.auth import (
    get_optional_current_user_from_cookie,
    get_pending_verification,
)
from resume_builder.app.core.config import Settings, get_settings
from resume_builder.app.core.security import PendingVerification
from resume_builder.app.core.validation import validate_password
from resume_builder.app.models.resume.template import Template
from resume_builder.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter()

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

AUTH_MODES = ("sign_in", "sign_up")


@router.get("/")
async def root(
    current_user: Annotated[User | None, Depends(get_optional_current_user_from_cookie)],
) -> RedirectResponse:
    """Send signed-in users to the builder and everyone else to the login page.

    Args:
        current_user (User | None): The signed-in user, if any.

    Returns:
        RedirectResponse: Redirect to `/builder` or `/login`.

    """
    _msg = "Root path requested"
    log.debug(_msg)
    target = "/builder" if current_user else "/login"
    return RedirectResponse(url=target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/login", response_class=HTMLResponse, name="login_page", response_model=None)
async def login_page(
    request: Request,
    current_user: Annotated[User | None, Depends(get_optional_current_user_from_cookie)],
    mode: str = "sign_in",
    email: str = "",
) -> HTMLResponse | RedirectResponse:
    """Serve the sign-in / sign-up page.

    Args:
        request: The HTTP request object.
        current_user: The signed-in user, if any.
        mode: Which form to show, 'sign_in' or 'sign_up'.
        email: Address to pre-fill, e.g. when returning from verification.

    Returns:
        TemplateResponse: The rendered login template, or a redirect to the
            builder when already signed in.

    """
    _msg = "Login page requested"
    log.debug(_msg)
    if current_user:
        return RedirectResponse(url="/builder", status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "mode": mode if mode in AUTH_MODES else "sign_in",
            "form": {"email": email, "full_name": ""},
            "password_validation": validate_password(""),
            "notifications": [],
        },
    )


@router.get("/verify", response_class=HTMLResponse, name="verify_page", response_model=None)
async def verify_page(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    pending: Annotated[PendingVerification | None, Depends(get_pending_verification)],
) -> HTMLResponse | RedirectResponse:
    """Serve the one-time code page for the pending sign-up.

    Notes:
        1. Without a pending verification, redirect to the login page.
        2. The resend countdown is computed from the time the last code was sent.

    """
    _msg = "Verify page requested"
    log.debug(_msg)
    if pending is None:
        return RedirectResponse(
            url=str(request.url_for("login_page")),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    cooldown = ResendCooldown(
        duration=settings.otp_resend_cooldown_seconds,
        started_at=pending.code_sent_at,
    )
    return templates.TemplateResponse(
        request,
        "verify.html",
        {"email": pending.email, "remaining": cooldown.remaining, "notifications": []},
    )


@router.get("/builder", response_class=HTMLResponse, name="builder_page")
async def builder_page(
    request: Request,
    workspace: Annotated[ResumeWorkspace, Depends(get_workspace)],
    catalog: Annotated[list[Template], Depends(get_templates)],
) -> HTMLResponse:
    """Serve the resume builder.

    Notes:
        1. Depends on `get_workspace`; unauthenticated browsers are redirected
           to the login page by the auth dependency.
        2. Opening the page loads the stored resume if the workspace has not been loaded yet.

    """
    _msg = "Builder page requested"
    log.debug(_msg)
    context = builder_context(workspace, catalog)
    context["session"] = workspace.session
    return templates.TemplateResponse(request, "builder.html", context)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}
