import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.orm import Session

from resume_builder.app.api.dependencies import get_auth_provider, is_htmx
from resume_builder.app.api.routes.html_fragments import (
    render_auth_form_html,
    render_password_strength_html,
    render_verify_form_html,
)
from resume_builder.app.api.routes.route_logic.auth_flow import (
    AuthFlow,
    AuthState,
    ResendCooldown,
)
from resume_builder.app.api.routes.route_logic.auth_provider import AuthProvider
from resume_builder.app.api.routes.route_logic.resume_workspace import (
    ResumeWorkspace,
    WorkspaceRegistry,
    get_workspace_registry,
)
from resume_builder.app.api.routes.route_models import (
    AuthOutcomeResponse,
    PasswordCheckRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    VerifyCodeRequest,
)
from resume_builder.app.core.auth import (
    ACCESS_TOKEN_COOKIE,
    PENDING_VERIFICATION_COOKIE,
    AuthSession,
    get_optional_current_user_from_cookie,
    get_pending_verification,
)
from resume_builder.app.core.config import Settings, get_settings
from resume_builder.app.core.security import (
    PendingVerification,
    create_access_token,
    create_pending_verification_token,
)
from resume_builder.app.core.validation import (
    ErrorCategory,
    PasswordValidation,
    validate_password,
)
from resume_builder.app.database.database import get_db
from resume_builder.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_FAILURE_STATUS = {
    ErrorCategory.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCategory.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorCategory.VERIFICATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NETWORK: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _set_cookie(response: Response, key: str, value: str, max_age: int | None = None):
    # These cookie parameters should match the ones used by the session middleware.
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        path="/",
        secure=False,  # Should be True in production & depend on settings
    )


def _start_session(response: Response, session: AuthSession, settings: Settings) -> None:
    token = create_access_token(data={"sub": str(session.user_id)}, settings=settings)
    _set_cookie(response, ACCESS_TOKEN_COOKIE, token)
    response.delete_cookie(PENDING_VERIFICATION_COOKIE, path="/")


def _set_pending_cookie(
    response: Response,
    flow: AuthFlow,
    settings: Settings,
) -> None:
    token = create_pending_verification_token(
        email=flow.pending_email,
        code_sent_at=flow.cooldown.started_at,
        settings=settings,
    )
    _set_cookie(
        response,
        PENDING_VERIFICATION_COOKIE,
        token,
        max_age=settings.pending_verification_expire_minutes * 60,
    )


def _flow_response(
    request: Request,
    flow: AuthFlow,
    view: str,
    status_code: int = status.HTTP_200_OK,
    redirect_to: str | None = None,
) -> Response:
    """Build the response for an authentication step.

    Args:
        request (Request): The incoming request.
        flow (AuthFlow): The flow after the step.
        view (str): 'sign_in', 'sign_up' or 'verify'; the form re-rendered for HTMX.
        status_code (int): Status for JSON clients.
        redirect_to (str | None): Page HTMX should navigate to on success.

    Returns:
        Response: An `HX-Redirect`, the re-rendered form, or an AuthOutcomeResponse.

    Notes:
        1. HTMX only swaps successful responses, so HTMX failures are sent with status 200.

    """
    if is_htmx(request):
        if redirect_to:
            return Response(headers={"HX-Redirect": redirect_to})
        if view == "verify":
            return HTMLResponse(render_verify_form_html(flow))
        return HTMLResponse(render_auth_form_html(flow, view))

    outcome = AuthOutcomeResponse(
        state=flow.state.value,
        email=flow.form.email or flow.pending_email,
        full_name=flow.form.full_name,
        resend_available_in=flow.cooldown.remaining,
        notifications=flow.notifications.drain(),
    )
    return JSONResponse(
        content=outcome.model_dump(by_alias=True, mode="json"),
        status_code=status_code,
    )


def _carry_notifications(request: Request, flow: AuthFlow, workspace: ResumeWorkspace) -> None:
    """Hand the flow's messages to the workspace, where the builder page shows them."""
    if is_htmx(request):
        for notification in flow.notifications.drain():
            workspace.notifications.notify(notification.title, notification.description)


def _failure_status(flow: AuthFlow) -> int:
    return _FAILURE_STATUS.get(flow.last_error, status.HTTP_400_BAD_REQUEST)


def _pending_flow(
    provider: AuthProvider,
    pending: PendingVerification,
    settings: Settings,
) -> AuthFlow:
    return AuthFlow(
        provider,
        state=AuthState.PENDING_VERIFICATION,
        pending_email=pending.email,
        cooldown=ResendCooldown(
            duration=settings.otp_resend_cooldown_seconds,
            started_at=pending.code_sent_at,
        ),
    )


def _require_pending(
    request: Request,
    pending: PendingVerification | None,
) -> PendingVerification:
    if pending is not None:
        return pending
    if is_htmx(request):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            headers={"HX-Redirect": str(request.url_for("login_page"))},
            detail="No verification in progress",
        )
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="No verification in progress",
    )


@router.post("/sign-up")
async def sign_up(
    request: Request,
    payload: SignUpRequest,
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Register an account and start email verification.

    Args:
        request (Request): The incoming request.
        payload (SignUpRequest): The sign-up form.
        provider (AuthProvider): The account operations.
        settings (Settings): The application settings.

    Returns:
        Response: On success a pending-verification cookie and a redirect to the
            verification page; on failure the form with its values and a generic message.

    Notes:
        1. Each value passes through the flow's input handling, so it is sanitized.
        2. Validation problems are reported before the provider is called.

    """
    _msg = "Sign up requested"
    log.debug(_msg)
    flow = AuthFlow(provider)
    for field, value in payload.model_dump().items():
        flow.handle_input_change(field, value)

    if not flow.sign_up():
        return _flow_response(request, flow, "sign_up", _failure_status(flow))

    response = _flow_response(request, flow, "verify", redirect_to="/verify")
    _set_pending_cookie(response, flow, settings)
    return response


@router.post("/sign-in")
async def sign_in(
    request: Request,
    payload: SignInRequest,
    db: Annotated[Session, Depends(get_db)],
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[WorkspaceRegistry, Depends(get_workspace_registry)],
) -> Response:
    """Sign in, set the session cookie and open the account's workspace."""
    _msg = "Sign in requested"
    log.debug(_msg)
    flow = AuthFlow(provider)
    flow.handle_input_change("email", payload.email)
    flow.handle_input_change("password", payload.password)

    if not flow.sign_in():
        return _flow_response(request, flow, "sign_in", _failure_status(flow))

    workspace = registry.open(flow.session, db)
    _carry_notifications(request, flow, workspace)
    response = _flow_response(request, flow, "sign_in", redirect_to="/builder")
    _start_session(response, flow.session, settings)
    return response


@router.post("/verify")
async def verify_code(
    request: Request,
    payload: VerifyCodeRequest,
    db: Annotated[Session, Depends(get_db)],
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[WorkspaceRegistry, Depends(get_workspace_registry)],
    pending: Annotated[PendingVerification | None, Depends(get_pending_verification)],
) -> Response:
    """Confirm the pending address with a one-time code.

    Returns:
        Response: On success the session cookie and a redirect to the builder;
            on failure the verification form with a generic message.

    Raises:
        HTTPException: 400 when no verification is in progress.

    """
    pending = _require_pending(request, pending)
    flow = _pending_flow(provider, pending, settings)

    if not flow.verify(payload.code):
        return _flow_response(request, flow, "verify", _failure_status(flow))

    workspace = registry.open(flow.session, db)
    _carry_notifications(request, flow, workspace)
    response = _flow_response(request, flow, "verify", redirect_to="/builder")
    _start_session(response, flow.session, settings)
    return response


@router.post("/resend")
async def resend_code(
    request: Request,
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
    pending: Annotated[PendingVerification | None, Depends(get_pending_verification)],
) -> Response:
    """Send a new one-time code to the pending address.

    Returns:
        Response: The verification form (HTMX) or an AuthOutcomeResponse. JSON
            clients get 429 while the cooldown is running; no code is sent then.

    Raises:
        HTTPException: 400 when no verification is in progress.

    """
    pending = _require_pending(request, pending)
    flow = _pending_flow(provider, pending, settings)

    cooling_down = flow.cooldown.is_active
    if not flow.resend():
        status_code = (
            status.HTTP_429_TOO_MANY_REQUESTS if cooling_down else _failure_status(flow)
        )
        return _flow_response(request, flow, "verify", status_code)

    response = _flow_response(request, flow, "verify")
    _set_pending_cookie(response, flow, settings)
    return response


@router.post("/back")
async def back_to_sign_up(
    request: Request,
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
    pending: Annotated[PendingVerification | None, Depends(get_pending_verification)],
) -> Response:
    """Abandon verification and return to the sign-up form with the email filled in."""
    email = pending.email if pending else ""
    flow = AuthFlow(
        provider,
        state=AuthState.PENDING_VERIFICATION if pending else AuthState.UNAUTHENTICATED,
        pending_email=email,
    )
    flow.back()
    response = _flow_response(
        request,
        flow,
        "sign_up",
        redirect_to=str(request.url_for("login_page").include_query_params(mode="sign_up", email=email)),
    )
    response.delete_cookie(PENDING_VERIFICATION_COOKIE, path="/")
    return response


@router.post("/sign-out")
async def sign_out(
    request: Request,
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    registry: Annotated[WorkspaceRegistry, Depends(get_workspace_registry)],
    current_user: Annotated[User | None, Depends(get_optional_current_user_from_cookie)],
) -> Response:
    """End the session, close the workspace and clear the session cookie.

    Notes:
        1. Unsaved workspace edits are discarded with the workspace.
        2. If the provider fails the session is kept and the failure reported.

    """
    session = AuthSession.from_user(current_user) if current_user else None
    flow = AuthFlow(
        provider,
        state=AuthState.AUTHENTICATED if session else AuthState.UNAUTHENTICATED,
        session=session,
    )
    if not flow.sign_out():
        return _flow_response(request, flow, "sign_in", _failure_status(flow))

    if session is not None:
        registry.close(session.user_id)
    response = _flow_response(
        request,
        flow,
        "sign_in",
        redirect_to=str(request.url_for("login_page")),
    )
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(PENDING_VERIFICATION_COOKIE, path="/")
    return response


@router.get("/session")
async def get_session(
    current_user: Annotated[User | None, Depends(get_optional_current_user_from_cookie)],
) -> SessionResponse:
    """Return the signed-in account.

    Raises:
        HTTPException: 401 when there is no valid session.

    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    session = AuthSession.from_user(current_user)
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        full_name=session.full_name,
    )


@router.post("/password-check", response_model=None)
async def password_check(
    request: Request,
    payload: PasswordCheckRequest,
) -> PasswordValidation | HTMLResponse:
    """Check a password against the policy while it is typed."""
    validation = validate_password(payload.password)
    if is_htmx(request):
        return HTMLResponse(render_password_strength_html(validation))
    return validation
