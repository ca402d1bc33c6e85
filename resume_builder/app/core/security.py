import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from resume_builder.app.core.config import Settings

if TYPE_CHECKING:
    from resume_builder.app.models.user import User

log = logging.getLogger(__name__)

ONE_TIME_CODE_LENGTH = 6
PENDING_VERIFICATION_PURPOSE = "pending_verification"

# bcrypt only considers the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class PendingVerification:
    """Claims carried by the pending-verification cookie.

    Attributes:
        email (str): The address the one-time code was sent to.
        code_sent_at (float): POSIX timestamp of the most recent code dispatch.

    """

    email: str
    code_sent_at: float


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data (dict): The claims to encode in the token (e.g. the user id as `sub`).
        settings (Settings): The application settings object.
        expires_delta (timedelta | None): Custom expiration time. If None, uses the configured default.

    Returns:
        str: The encoded JWT token.

    Notes:
        1. Copy the data to avoid modifying the original.
        2. Set expiration time based on expires_delta or default.
        3. Encode the data with the secret key and algorithm.
        4. No database or network access in this function.

    """
    _msg = "Creating access token"
    log.debug(_msg)
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes,
        )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def create_pending_verification_token(
    email: str,
    code_sent_at: float,
    settings: Settings,
) -> str:
    """Create the signed token that tracks a sign-up awaiting its one-time code.

    Args:
        email (str): The address the code was sent to.
        code_sent_at (float): POSIX timestamp of the code dispatch, used to restore the resend cooldown.
        settings (Settings): The application settings object.

    Returns:
        str: The encoded JWT token.

    """
    return create_access_token(
        data={
            "sub": email,
            "purpose": PENDING_VERIFICATION_PURPOSE,
            "code_sent_at": code_sent_at,
        },
        settings=settings,
        expires_delta=timedelta(minutes=settings.pending_verification_expire_minutes),
    )


def decode_pending_verification_token(
    token: str,
    settings: Settings,
) -> PendingVerification | None:
    """Decode a pending-verification token.

    Args:
        token (str): The token from the `pending_verification` cookie.
        settings (Settings): The application settings object.

    Returns:
        PendingVerification | None: The decoded claims, or None if the token is invalid, expired or of another purpose.

    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        _msg = f"Pending verification token rejected: {e}"
        log.debug(_msg)
        return None

    if payload.get("purpose") != PENDING_VERIFICATION_PURPOSE or not payload.get("sub"):
        return None

    return PendingVerification(
        email=payload["sub"],
        code_sent_at=float(payload.get("code_sent_at", 0)),
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a bcrypt hash.

    Args:
        plain_password (str): The plain text password to verify.
        hashed_password (str): The hashed password to compare against.

    Returns:
        bool: True if the password matches, False otherwise.

    """
    _msg = "Verifying password"
    log.debug(_msg)
    return bcrypt.checkpw(
        plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
        hashed_password.encode("utf-8"),
    )


def get_password_hash(password: str) -> str:
    """Hash a plain password with bcrypt.

    Args:
        password (str): The plain text password to hash.

    Returns:
        str: The hashed password.

    """
    _msg = "Hashing password"
    log.debug(_msg)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt)
    return hashed.decode("utf-8")


def generate_one_time_code(length: int = ONE_TIME_CODE_LENGTH) -> str:
    """Generate a numeric one-time code using a cryptographically secure source."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def authenticate_user(db: Session, email: str, password: str) -> Optional["User"]:
    """Authenticate a user by email and password.

    Args:
        db (Session): Database session used to query for user records.
        email (str): Email address to authenticate.
        password (str): Password to verify.

    Returns:
        Optional[User]: The authenticated user if successful, None otherwise.

    Notes:
        1. Query the database for an active user with the given email.
        2. If the user exists and the password is correct, return the user.
        3. Otherwise, return None.

    """
    _msg = f"Authenticating user: {email}"
    log.debug(_msg)

    from resume_builder.app.models.user import User

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
