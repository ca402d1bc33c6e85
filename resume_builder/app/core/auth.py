import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from resume_builder.app.core.config import Settings, get_settings
from resume_builder.app.core.security import (
    PendingVerification,
    decode_pending_verification_token,
)
from resume_builder.app.database.database import get_db
from resume_builder.app.models.user import User

log = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
PENDING_VERIFICATION_COOKIE = "pending_verification"


@dataclass(frozen=True)
class AuthSession:
    """The signed-in account, as handed to everything that needs one.

    Attributes:
        user_id (int): Account identifier; keys all of the account's resumes.
        email (str): The account's email address.
        full_name (str): Display name captured at sign-up.

    """

    user_id: int
    email: str
    full_name: str = ""

    @classmethod
    def from_user(cls, user: User) -> "AuthSession":
        return cls(user_id=user.id, email=user.email, full_name=user.full_name or "")


def _user_id_from_token(token: str, settings: Settings) -> int | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        _msg = f"Access token rejected: {e}"
        log.debug(_msg)
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def get_current_user_from_cookie(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Retrieve the authenticated user from the JWT token in the request cookie.

    For browser requests that fail authentication, this raises an
    HTTPException that redirects to the login page. For API requests, it
    raises a 401.

    Args:
        request: The request object, used to access cookies and headers.
        db: Database session dependency.

    Returns:
        User: The authenticated, active and verified user.

    Raises:
        HTTPException: 307 to the login page for browsers, 401 for JSON clients,
            and 401 with an `HX-Redirect` header for HTMX requests.

    Notes:
        1. Determine if the request is from a browser by checking the 'Accept' header.
        2. Read the `access_token` cookie and decode it; `sub` holds the user id.
        3. Load the user; missing, inactive or unverified users fail authentication.

    Database Access:
        - Queries the User table to retrieve a user record by id.

    """
    settings = get_settings()
    accept_header = request.headers.get("Accept", "")
    prefers_html = "application/json" not in accept_header

    def handle_auth_failure():
        login_url = str(request.url_for("login_page"))
        if "hx-request" in request.headers:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers={"HX-Redirect": login_url},
                detail="Not authenticated",
            )
        if prefers_html:
            raise HTTPException(
                status_code=status.HTTP_307_TEMPORARY_REDIRECT,
                headers={"Location": login_url},
                detail="Not authenticated, redirecting to login.",
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        handle_auth_failure()

    user_id = _user_id_from_token(token, settings)
    if user_id is None:
        handle_auth_failure()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active or not user.is_verified:
        handle_auth_failure()

    return user


def get_optional_current_user_from_cookie(
    request: Request,
    db: Session = Depends(get_db),
) -> User | None:
    """Return the signed-in user, or None when the request is not authenticated."""
    try:
        return get_current_user_from_cookie(request=request, db=db)
    except HTTPException:
        return None


def get_auth_session(
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> AuthSession:
    """Dependency returning the signed-in account as an AuthSession."""
    return AuthSession.from_user(current_user)


def get_pending_verification(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> PendingVerification | None:
    """Read the pending-verification cookie.

    Returns:
        PendingVerification | None: The pending email and code dispatch time,
            or None when there is no valid cookie.

    """
    token = request.cookies.get(PENDING_VERIFICATION_COOKIE)
    if not token:
        return None
    return decode_pending_verification_token(token, settings)
