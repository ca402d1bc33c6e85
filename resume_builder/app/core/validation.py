import logging
import re
from enum import Enum

from pydantic import BaseModel

log = logging.getLogger(__name__)

EMAIL_MAX_LENGTH = 320
PASSWORD_MIN_LENGTH = 8

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UNSAFE_CHARACTERS = re.compile(r"[<>\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Ordered: the first entry is reported first when unmet.
_PASSWORD_REQUIREMENTS: tuple[tuple[str, re.Pattern | None], ...] = (
    (f"Password must be at least {PASSWORD_MIN_LENGTH} characters long", None),
    ("Password must contain at least one uppercase letter", re.compile(r"[A-Z]")),
    ("Password must contain at least one lowercase letter", re.compile(r"[a-z]")),
    ("Password must contain at least one number", re.compile(r"\d")),
    (
        "Password must contain at least one special character",
        re.compile(r"[^A-Za-z0-9\s]"),
    ),
)


class ErrorCategory(str, Enum):
    """Coarse error categories surfaced to users."""

    AUTH = "auth"
    NETWORK = "network"
    VERIFICATION = "verification"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


_GENERIC_ERROR_MESSAGES = {
    ErrorCategory.AUTH: "Authentication failed. Please check your credentials and try again.",
    ErrorCategory.NETWORK: "A network error occurred. Please check your connection and try again.",
    ErrorCategory.VERIFICATION: "The verification code is invalid or has expired.",
    ErrorCategory.VALIDATION: "Please check your input and try again.",
    ErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}


class PasswordValidation(BaseModel):
    """Result of checking a password against the password policy.

    Attributes:
        is_valid (bool): True when every requirement is met.
        errors (list[str]): Messages for the unmet requirements, in policy order.
        strength (int): Number of satisfied requirements, from 0 to 5.

    """

    is_valid: bool
    errors: list[str]
    strength: int


def sanitize_input(value: str, max_length: int = 1000) -> str:
    """Clean free-text input before it is stored or rendered.

    Args:
        value (str): The raw user input.
        max_length (int): The maximum length of the returned string.

    Returns:
        str: The sanitized value, never longer than `max_length`.

    Notes:
        1. Strip leading and trailing whitespace.
        2. Remove angle brackets and control characters.
        3. Truncate to `max_length`; a non-positive limit yields an empty string.

    """
    if max_length <= 0:
        return ""
    cleaned = _UNSAFE_CHARACTERS.sub("", value.strip())
    return cleaned[:max_length]


def validate_email(value: str) -> bool:
    """Check that a value has the shape of an email address.

    Args:
        value (str): The candidate email address.

    Returns:
        bool: True if the value looks like `local@domain.tld`.

    """
    if not value or len(value) > EMAIL_MAX_LENGTH:
        return False
    return _EMAIL_PATTERN.match(value) is not None


def validate_password(value: str) -> PasswordValidation:
    """Check a password against the password policy.

    Args:
        value (str): The candidate password.

    Returns:
        PasswordValidation: Validity, the unmet requirement messages and a strength score.

    Notes:
        1. Evaluate each requirement in order: length, uppercase, lowercase, digit, special character.
        2. Collect the message of every unmet requirement.
        3. The strength score is the count of satisfied requirements and does not gate validity.

    """
    errors: list[str] = []
    for message, pattern in _PASSWORD_REQUIREMENTS:
        if pattern is None:
            satisfied = len(value) >= PASSWORD_MIN_LENGTH
        else:
            satisfied = pattern.search(value) is not None
        if not satisfied:
            errors.append(message)

    return PasswordValidation(
        is_valid=not errors,
        errors=errors,
        strength=len(_PASSWORD_REQUIREMENTS) - len(errors),
    )


def get_generic_error_message(category: ErrorCategory | str) -> str:
    """Map an error category to a user-safe message.

    Backend error text is never passed through, so responses do not reveal
    whether an account exists or how the backend failed.

    Args:
        category (ErrorCategory | str): The error category.

    Returns:
        str: A generic message for the category.

    """
    try:
        category = ErrorCategory(category)
    except ValueError:
        category = ErrorCategory.UNKNOWN
    return _GENERIC_ERROR_MESSAGES[category]
