import logging
import math
import re
import time
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from resume_builder.app.api.routes.route_logic.auth_provider import (
    AuthProvider,
    AuthProviderError,
    AuthTransportError,
)
from resume_builder.app.core.auth import AuthSession
from resume_builder.app.core.notifications import NotificationLog
from resume_builder.app.core.security import ONE_TIME_CODE_LENGTH
from resume_builder.app.core.validation import (
    EMAIL_MAX_LENGTH,
    ErrorCategory,
    PasswordValidation,
    get_generic_error_message,
    sanitize_input,
    validate_email,
    validate_password,
)

log = logging.getLogger(__name__)

RESEND_COOLDOWN_SECONDS = 60
FULL_NAME_MAX_LENGTH = 100
FULL_NAME_MIN_LENGTH = 2

_CODE_PATTERN = re.compile(rf"^\d{{{ONE_TIME_CODE_LENGTH}}}$")


class AuthState(str, Enum):
    """Where a visitor is in the authentication flow."""

    UNAUTHENTICATED = "unauthenticated"
    PENDING_VERIFICATION = "pending_verification"
    AUTHENTICATED = "authenticated"
    SIGNING_OUT = "signing_out"


class ResendCooldown:
    """A fixed window after each code dispatch during which resends are refused.

    Args:
        duration (int): Window length in seconds.
        started_at (float | None): POSIX time of the last dispatch, None if nothing was sent.
        clock (Callable[[], float]): Returns the current POSIX time.

    """

    def __init__(
        self,
        duration: int = RESEND_COOLDOWN_SECONDS,
        started_at: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.duration = duration
        self.started_at = started_at
        self.clock = clock

    @property
    def remaining(self) -> int:
        """Whole seconds left in the window, counting down to 0."""
        if self.started_at is None:
            return 0
        elapsed = self.clock() - self.started_at
        return max(0, math.ceil(self.duration - elapsed))

    @property
    def is_active(self) -> bool:
        return self.remaining > 0

    def restart(self, at: float | None = None) -> None:
        self.started_at = self.clock() if at is None else at


class AuthFormData(BaseModel):
    """Values entered in the sign-in and sign-up forms."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = ""
    password: str = ""
    confirm_password: str = ""
    full_name: str = ""


def _resolve_form_field(field: str) -> str:
    for name, info in AuthFormData.model_fields.items():
        if field in (name, info.alias):
            return name
    raise ValueError(f"Unknown form field '{field}'")


class AuthFlow:
    """Sequences the authentication screens around an AuthProvider.

    The flow validates input before any provider call, turns every provider
    outcome into a notification with a generic message, and never clears the
    entered email or full name on failure.

    Attributes:
        state (AuthState): The current state.
        session (AuthSession | None): The signed-in account, when authenticated.
        pending_email (str): The address awaiting verification.
        form (AuthFormData): The entered form values.
        password_validation (PasswordValidation): Policy check of the entered password.
        cooldown (ResendCooldown): Throttle for code resends.
        is_loading (bool): True while a sign-in or sign-up call runs.
        is_verifying (bool): True while a code is being checked.
        is_resending (bool): True while a code resend runs.
        last_error (ErrorCategory | None): Category of the most recent failure.

    """

    def __init__(
        self,
        provider: AuthProvider,
        notifications: NotificationLog | None = None,
        state: AuthState = AuthState.UNAUTHENTICATED,
        session: AuthSession | None = None,
        pending_email: str = "",
        cooldown: ResendCooldown | None = None,
    ):
        self.provider = provider
        self.notifications = notifications or NotificationLog()
        self.state = state
        self.session = session
        self.pending_email = pending_email
        self.cooldown = cooldown or ResendCooldown()
        self.form = AuthFormData(email=pending_email)
        self.password_validation: PasswordValidation = validate_password("")
        self.is_loading = False
        self.is_verifying = False
        self.is_resending = False
        self.last_error: ErrorCategory | None = None

    def handle_input_change(self, field: str, value: str) -> AuthFormData:
        """Record a form value.

        Args:
            field (str): Form field name, snake_case or camelCase.
            value (str): The entered value.

        Returns:
            AuthFormData: The updated form values.

        Raises:
            ValueError: If the field is not a form field.

        Notes:
            1. Full name is sanitized and clamped to 100 characters, email to 320.
            2. A password change recomputes `password_validation`.

        """
        name = _resolve_form_field(field)
        if name == "full_name":
            value = sanitize_input(value, FULL_NAME_MAX_LENGTH)
        elif name == "email":
            value = sanitize_input(value, EMAIL_MAX_LENGTH)
        elif name == "password":
            self.password_validation = validate_password(value)

        self.form = self.form.model_copy(update={name: value})
        return self.form

    def validate_form(self, is_sign_up: bool) -> bool:
        """Check the form before contacting the provider; notify on the first problem."""
        if not validate_email(self.form.email):
            return self._fail(
                "Invalid email",
                ErrorCategory.VALIDATION,
                "Please enter a valid email address.",
            )
        if not is_sign_up:
            return True

        if not self.password_validation.is_valid:
            return self._fail(
                "Password requirements not met",
                ErrorCategory.VALIDATION,
                "Please ensure your password meets all requirements.",
            )
        if self.form.password != self.form.confirm_password:
            return self._fail(
                "Passwords don't match",
                ErrorCategory.VALIDATION,
                "Please ensure both password fields match.",
            )
        if len(self.form.full_name) < FULL_NAME_MIN_LENGTH:
            return self._fail(
                "Name required",
                ErrorCategory.VALIDATION,
                "Please enter your full name (at least 2 characters).",
            )
        return True

    def sign_up(self) -> bool:
        """Register the entered account and move to pending verification.

        Returns:
            bool: True when a verification code was sent.

        Notes:
            1. Invalid input is reported without calling the provider.
            2. A rejection shows the generic auth message; a transport failure the generic network message.
            3. On failure the state and the entered email and full name are kept.
            4. On success the cooldown starts at the dispatch time and the passwords are cleared.

        """
        if not self.validate_form(is_sign_up=True):
            return False

        self.is_loading = True
        try:
            dispatch = self.provider.sign_up(
                self.form.email,
                self.form.password,
                self.form.full_name,
            )
        except AuthProviderError as e:
            _msg = f"Sign up rejected: {e}"
            log.warning(_msg)
            return self._fail("Sign up failed", ErrorCategory.AUTH)
        except AuthTransportError:
            return self._fail("An error occurred", ErrorCategory.NETWORK)
        finally:
            self.is_loading = False

        self.state = AuthState.PENDING_VERIFICATION
        self.pending_email = dispatch.email
        self.cooldown.restart(at=dispatch.sent_at)
        self.form = self.form.model_copy(update={"password": "", "confirm_password": ""})
        self.notifications.notify(
            "Check your email",
            f"We've sent a {ONE_TIME_CODE_LENGTH}-digit verification code to {dispatch.email}.",
        )
        return True

    def sign_in(self) -> bool:
        """Sign in with the entered credentials."""
        if not self.validate_form(is_sign_up=False):
            return False

        self.is_loading = True
        try:
            session = self.provider.sign_in(self.form.email, self.form.password)
        except AuthProviderError as e:
            _msg = f"Sign in rejected: {e}"
            log.warning(_msg)
            return self._fail("Sign in failed", ErrorCategory.AUTH)
        except AuthTransportError:
            return self._fail("An error occurred", ErrorCategory.NETWORK)
        finally:
            self.is_loading = False

        self._authenticate(session)
        self.notifications.notify("Welcome back!", "Successfully signed in to your account.")
        return True

    def verify(self, code: str) -> bool:
        """Submit a one-time code for the pending address.

        Args:
            code (str): The code as entered.

        Returns:
            bool: True when the address was verified and the account signed in.

        Notes:
            1. Anything but exactly six digits is rejected without a provider call.
            2. A rejected code shows the generic verification message, never the provider's text.

        """
        code = code.strip()
        if not _CODE_PATTERN.match(code):
            return self._fail(
                "Invalid OTP",
                ErrorCategory.VALIDATION,
                f"Please enter a {ONE_TIME_CODE_LENGTH}-digit verification code.",
            )

        self.is_verifying = True
        try:
            session = self.provider.verify_code(self.pending_email, code)
        except AuthProviderError as e:
            _msg = f"Verification rejected: {e}"
            log.warning(_msg)
            return self._fail("Verification failed", ErrorCategory.VERIFICATION)
        except AuthTransportError:
            return self._fail("Verification error", ErrorCategory.NETWORK)
        finally:
            self.is_verifying = False

        self._authenticate(session)
        self.notifications.notify("Email verified successfully!", "Welcome to Resume Builder!")
        return True

    def resend(self) -> bool:
        """Send a new code to the pending address unless the cooldown is running.

        Returns:
            bool: True when a new code was sent. While the cooldown is active
                the request is refused without calling the provider.

        """
        if self.cooldown.is_active:
            _msg = f"Resend refused, {self.cooldown.remaining}s of cooldown left"
            log.debug(_msg)
            return self._fail(
                "Please wait",
                ErrorCategory.VALIDATION,
                f"You can request a new code in {self.cooldown.remaining}s.",
            )

        self.is_resending = True
        try:
            dispatch = self.provider.resend_code(self.pending_email)
        except AuthProviderError as e:
            _msg = f"Resend rejected: {e}"
            log.warning(_msg)
            return self._fail("Failed to resend code", ErrorCategory.VERIFICATION)
        except AuthTransportError:
            return self._fail("Error", ErrorCategory.NETWORK)
        finally:
            self.is_resending = False

        self.cooldown.restart(at=dispatch.sent_at)
        self.notifications.notify(
            "Verification code sent",
            "A new code has been sent to your email.",
        )
        return True

    def back(self) -> None:
        """Leave verification and return to the sign-up form with its email kept."""
        if self.state == AuthState.PENDING_VERIFICATION:
            self.state = AuthState.UNAUTHENTICATED
            self.form = self.form.model_copy(update={"email": self.pending_email})

    def sign_out(self) -> bool:
        """End the session.

        Returns:
            bool: True when signed out. On a provider failure the session is kept.

        """
        if self.session is None:
            self.state = AuthState.UNAUTHENTICATED
            return True

        self.state = AuthState.SIGNING_OUT
        try:
            self.provider.sign_out(self.session)
        except (AuthProviderError, AuthTransportError) as e:
            _msg = f"Sign out failed: {e}"
            log.warning(_msg)
            self.state = AuthState.AUTHENTICATED
            return self._fail("Sign out failed", ErrorCategory.NETWORK)

        self.session = None
        self.pending_email = ""
        self.state = AuthState.UNAUTHENTICATED
        return True

    def _authenticate(self, session: AuthSession) -> None:
        self.session = session
        self.state = AuthState.AUTHENTICATED
        self.pending_email = ""
        self.last_error = None
        self.form = AuthFormData()

    def _fail(
        self,
        title: str,
        category: ErrorCategory,
        description: str | None = None,
    ) -> bool:
        """Record a failed step: notify and remember its category. Always returns False."""
        self.last_error = category
        self.notifications.error(
            title,
            description if description is not None else get_generic_error_message(category),
        )
        return False
