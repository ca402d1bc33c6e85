import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from resume_builder.app.core.notifications import Notification

log = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """Request/response base accepting snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth
class SignUpRequest(CamelModel):
    """Request model for registering an account.

    Attributes:
        email (str): The address to register.
        password (str): The chosen password.
        confirm_password (str): The password typed a second time.
        full_name (str): Display name.

    """

    email: str = ""
    password: str = ""
    confirm_password: str = ""
    full_name: str = ""


class SignInRequest(CamelModel):
    """Request model for signing in."""

    email: str = ""
    password: str = ""


class VerifyCodeRequest(CamelModel):
    """Request model carrying a one-time code."""

    code: str = ""


class PasswordCheckRequest(CamelModel):
    """Request model for the live password policy check."""

    password: str = ""


class AuthOutcomeResponse(CamelModel):
    """Result of an authentication step.

    Attributes:
        state (str): The flow state after the step.
        email (str): The entered, or pending, email address.
        full_name (str): The entered full name.
        resend_available_in (int): Seconds until another code may be requested.
        notifications (list[Notification]): Messages produced by the step.

    """

    state: str
    email: str = ""
    full_name: str = ""
    resend_available_in: int = 0
    notifications: list[Notification] = []


class SessionResponse(CamelModel):
    """The signed-in account."""

    user_id: int
    email: EmailStr
    full_name: str = ""


# Resume
class FieldUpdateRequest(CamelModel):
    """Request model setting one field to a value.

    Attributes:
        field (str): Field name, snake_case or camelCase.
        value (str): The new value.

    """

    field: str
    value: str = ""


class SkillValueRequest(CamelModel):
    """Request model carrying skill text."""

    value: str = ""


class SkillKeyRequest(CamelModel):
    """Request model for a key pressed in a skill input.

    Attributes:
        key (str): The key name, e.g. 'Enter'.
        value (str | None): The input's current text; None keeps the buffered text.

    """

    key: str
    value: str | None = None


class ResumeStateResponse(CamelModel):
    """The workspace as seen by API clients.

    Attributes:
        document (dict[str, Any]): The resume in storage shape (camelCase keys).
        template_id (str): The selected template.
        completion (int): Completion percentage.
        skill_input (dict[str, str]): Pending skill text per category.
        is_saving (bool): True while a save runs.
        notifications (list[Notification]): Messages not yet shown.

    """

    document: dict[str, Any]
    template_id: str
    completion: int
    skill_input: dict[str, str]
    is_saving: bool = False
    notifications: list[Notification] = []


class SaveResponse(CamelModel):
    """Result of a save request."""

    saved: bool
    notifications: list[Notification] = []


class SuggestionResponse(CamelModel):
    """A resume-writing tip."""

    suggestion: str


# Templates
class TemplateSelectRequest(CamelModel):
    """Request model for choosing a template."""

    template_id: str
