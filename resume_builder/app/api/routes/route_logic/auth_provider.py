"""
Account operations behind the authentication flow.

`AuthProvider` is the contract the flow talks to. `DatabaseAuthProvider`
implements it against the `users` and `one_time_codes` tables.

Notes:
1. Rejections raise `AuthProviderError`; its message is for logs only.
2. Database failures raise `AuthTransportError`.
3. Passwords and one-time codes are stored as bcrypt hashes.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_builder.app.core.auth import AuthSession
from resume_builder.app.core.config import Settings
from resume_builder.app.core.security import (
    authenticate_user,
    generate_one_time_code,
    get_password_hash,
    verify_password,
)
from resume_builder.app.models.one_time_code import OneTimeCode
from resume_builder.app.models.user import User, UserData

log = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """The provider rejected a request (bad credentials, duplicate account, bad code)."""


class AuthTransportError(Exception):
    """The provider could not be reached or failed while handling a request."""


@dataclass(frozen=True)
class CodeDispatch:
    """Record of a one-time code sent to an address.

    Attributes:
        email (str): Where the code was sent.
        sent_at (float): POSIX timestamp of the dispatch.

    """

    email: str
    sent_at: float


class CodeSender(ABC):
    """Delivers one-time codes out of band."""

    @abstractmethod
    def send(self, email: str, code: str) -> None:
        """Deliver `code` to `email`."""


class LoggingCodeSender(CodeSender):
    """Writes codes to the application log, for local development."""

    def send(self, email: str, code: str) -> None:
        _msg = f"One-time code for {email}: {code}"
        log.info(_msg)


class AuthProvider(ABC):
    """The account operations the authentication flow depends on."""

    @abstractmethod
    def sign_up(self, email: str, password: str, full_name: str) -> CodeDispatch:
        """Register an account and send it a one-time code."""

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials of a verified account."""

    @abstractmethod
    def sign_out(self, session: AuthSession) -> None:
        """End a session."""

    @abstractmethod
    def verify_code(self, email: str, code: str) -> AuthSession:
        """Confirm an address with its one-time code."""

    @abstractmethod
    def resend_code(self, email: str) -> CodeDispatch:
        """Send a fresh one-time code to an unverified address."""

    @abstractmethod
    def get_session(self, user_id: int) -> AuthSession | None:
        """Return the session of an account that may still sign in, or None."""


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseAuthProvider(AuthProvider):
    """AuthProvider backed by the application database.

    Args:
        db (Session): The database session.
        settings (Settings): Supplies the one-time code lifetime.
        sender (CodeSender | None): Delivers codes; logs them when None.
        clock (Callable[[], datetime]): Returns the current UTC time.

    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        sender: CodeSender | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.settings = settings
        self.sender = sender or LoggingCodeSender()
        self.clock = clock

    @contextmanager
    def _database_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            _msg = f"Database error during {operation}"
            log.exception(_msg)
            self.db.rollback()
            raise AuthTransportError(_msg) from e

    def _find_user(self, email: str) -> User | None:
        return (
            self.db.query(User).filter(User.email == _normalize_email(email)).first()
        )

    def _issue_code(self, user: User) -> CodeDispatch:
        code = generate_one_time_code()
        now = self.clock()
        self.db.add(
            OneTimeCode(
                user_id=user.id,
                hashed_code=get_password_hash(code),
                sent_at=now,
                expires_at=now + timedelta(minutes=self.settings.otp_expire_minutes),
            ),
        )
        self.db.commit()
        self.sender.send(user.email, code)
        return CodeDispatch(email=user.email, sent_at=now.timestamp())

    def sign_up(self, email: str, password: str, full_name: str) -> CodeDispatch:
        """Register an account and send it a one-time code.

        Args:
            email (str): The address to register.
            password (str): The plain password; only its hash is stored.
            full_name (str): Display name.

        Returns:
            CodeDispatch: Where and when the code was sent.

        Raises:
            AuthProviderError: If a verified account already uses the address.
            AuthTransportError: On a database error.

        Notes:
            1. An existing unverified account takes the new password and name
               and receives a new code, so an abandoned sign-up can be finished.

        """
        with self._database_errors("sign up"):
            user = self._find_user(email)
            if user is not None and user.is_verified:
                raise AuthProviderError("User already registered")

            hashed_password = get_password_hash(password)
            if user is None:
                user = User(
                    data=UserData(
                        email=_normalize_email(email),
                        hashed_password=hashed_password,
                        full_name=full_name,
                    ),
                )
                self.db.add(user)
            else:
                user.hashed_password = hashed_password
                user.full_name = full_name
            self.db.commit()
            self.db.refresh(user)

            _msg = f"Account registered for user {user.id}, awaiting verification"
            log.debug(_msg)
            return self._issue_code(user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        with self._database_errors("sign in"):
            user = authenticate_user(self.db, _normalize_email(email), password)
            if user is None:
                raise AuthProviderError("Invalid login credentials")
            if not user.is_verified:
                raise AuthProviderError("Email not confirmed")
            return AuthSession.from_user(user)

    def sign_out(self, session: AuthSession) -> None:
        # Sessions are signed cookies; there is no server-side record to revoke.
        _msg = f"User {session.user_id} signed out"
        log.debug(_msg)

    def verify_code(self, email: str, code: str) -> AuthSession:
        """Confirm an address with the most recently sent code.

        Raises:
            AuthProviderError: If the account is unknown, or the latest code is
                wrong, consumed or expired.
            AuthTransportError: On a database error.

        """
        with self._database_errors("code verification"):
            user = self._find_user(email)
            if user is None:
                raise AuthProviderError("Token has expired or is invalid")

            latest = (
                self.db.query(OneTimeCode)
                .filter(OneTimeCode.user_id == user.id)
                .order_by(OneTimeCode.sent_at.desc(), OneTimeCode.id.desc())
                .first()
            )
            now = self.clock()
            if (
                latest is None
                or not latest.is_usable(now)
                or not verify_password(code, latest.hashed_code)
            ):
                raise AuthProviderError("Token has expired or is invalid")

            latest.consumed_at = now
            user.is_verified = True
            self.db.commit()
            _msg = f"User {user.id} verified"
            log.debug(_msg)
            return AuthSession.from_user(user)

    def resend_code(self, email: str) -> CodeDispatch:
        with self._database_errors("code resend"):
            user = self._find_user(email)
            if user is None or user.is_verified:
                raise AuthProviderError("No pending verification for this address")
            return self._issue_code(user)

    def get_session(self, user_id: int) -> AuthSession | None:
        with self._database_errors("session lookup"):
            user = self.db.query(User).filter(User.id == user_id).first()
            if user is None or not user.is_active or not user.is_verified:
                return None
            return AuthSession.from_user(user)
