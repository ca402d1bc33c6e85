import logging
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader

from resume_builder.app.core.notifications import Notification
from resume_builder.app.core.validation import PasswordValidation
from resume_builder.app.models.resume.template import Template

if TYPE_CHECKING:
    from resume_builder.app.api.routes.route_logic.auth_flow import AuthFlow
    from resume_builder.app.api.routes.route_logic.resume_workspace import (
        ResumeWorkspace,
    )

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def builder_context(workspace: "ResumeWorkspace", templates: list[Template]) -> dict:
    """Values shared by the builder page and its fragments.

    Notes:
        1. Drains the workspace notifications, so each message is shown once.

    """
    return {
        "document": workspace.document,
        "preview": workspace.preview(templates),
        "completion": workspace.completion,
        "skill_input": workspace.skill_input.as_dict(),
        "templates": templates,
        "template_id": workspace.template_id,
        "is_saving": workspace.is_saving,
        "notifications": workspace.notifications.drain(),
    }


def render_workspace_html(
    workspace: "ResumeWorkspace",
    templates: list[Template],
) -> str:
    """
    Render the form panel and preview together, for edits that change the form layout.

    Args:
        workspace (ResumeWorkspace): The account's workspace.
        templates (list[Template]): The template catalog.

    Returns:
        str: HTML for `#workspace`, plus out-of-band notifications.

    Notes:
        1. Renders the `partials/builder/_workspace.html` template.

    """
    template = env.get_template("partials/builder/_workspace.html")
    return template.render(oob=True, **builder_context(workspace, templates))


def render_preview_html(workspace: "ResumeWorkspace", templates: list[Template]) -> str:
    """
    Render the live preview and completion bar, for edits that keep the form as typed.

    Notes:
        1. Renders the `partials/builder/_preview.html` template.

    """
    template = env.get_template("partials/builder/_preview.html")
    return template.render(oob=True, **builder_context(workspace, templates))


def render_notifications_html(notifications: list[Notification]) -> str:
    """Render toasts as an out-of-band swap into `#notifications`."""
    template = env.get_template("partials/_notifications.html")
    return template.render(notifications=notifications, oob=True)


def render_auth_form_html(flow: "AuthFlow", mode: str) -> str:
    """
    Render the sign-in or sign-up form with the entered values and any messages.

    Args:
        flow (AuthFlow): The flow holding the form values and notifications.
        mode (str): 'sign_in' or 'sign_up'.

    Returns:
        str: HTML for `#auth-form`.

    """
    template = env.get_template("partials/_auth_form.html")
    return template.render(
        mode=mode,
        form=flow.form,
        password_validation=flow.password_validation,
        notifications=flow.notifications.drain(),
        oob=True,
    )


def render_verify_form_html(flow: "AuthFlow") -> str:
    """Render the one-time code form with the resend countdown."""
    template = env.get_template("partials/_verify_form.html")
    return template.render(
        email=flow.pending_email,
        remaining=flow.cooldown.remaining,
        notifications=flow.notifications.drain(),
        oob=True,
    )


def render_password_strength_html(validation: PasswordValidation) -> str:
    """Render the password requirement checklist shown while typing."""
    template = env.get_template("partials/_password_strength.html")
    return template.render(password_validation=validation)


def render_templates_html(templates: list[Template], template_id: str) -> str:
    """Render the template picker with the selected template marked."""
    template = env.get_template("partials/builder/_templates.html")
    return template.render(templates=templates, template_id=template_id)
