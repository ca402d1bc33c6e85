from resume_builder.app.api.routes.html_fragments import (
    render_notifications_html,
    render_password_strength_html,
    render_preview_html,
    render_templates_html,
    render_workspace_html,
)
from resume_builder.app.api.routes.route_logic.resume_workspace import ResumeWorkspace
from resume_builder.app.api.routes.route_logic.template_catalog import BUILT_IN_TEMPLATES
from resume_builder.app.core.auth import AuthSession
from resume_builder.app.core.notifications import Notification, NotificationVariant
from resume_builder.app.core.validation import validate_password


def _workspace() -> ResumeWorkspace:
    return ResumeWorkspace(AuthSession(user_id=1, email="jane@example.com"))


def test_notifications_are_out_of_band():
    html = render_notifications_html(
        [
            Notification(title="Resume saved", description="All good."),
            Notification(title="Oops", variant=NotificationVariant.DESTRUCTIVE),
        ],
    )

    assert 'id="notifications"' in html
    assert 'hx-swap-oob="true"' in html
    assert "Resume saved" in html
    assert "destructive" in html


def test_notification_text_is_escaped():
    html = render_notifications_html([Notification(title="<script>alert(1)</script>")])

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_empty_preview_shows_placeholder():
    html = render_preview_html(_workspace(), list(BUILT_IN_TEMPLATES))

    assert 'id="preview"' in html
    assert "layout-modern" in html
    assert "0%" in html


def test_preview_renders_content():
    workspace = _workspace()
    workspace.update_personal("fullName", "Jane Doe")
    entry = workspace.add_entry("experience")
    workspace.update_entry("experience", entry.id, "company", "Acme Corp")
    workspace.set_skill_input("languages", "Python")
    workspace.commit_skill("languages")

    html = render_preview_html(workspace, list(BUILT_IN_TEMPLATES))

    assert "Jane Doe" in html
    assert "Acme Corp" in html
    assert "Python" in html


def test_workspace_fragment_drains_notifications():
    workspace = _workspace()
    workspace.notifications.notify("Suggestion", "Use action verbs.")

    html = render_workspace_html(workspace, list(BUILT_IN_TEMPLATES))

    assert 'id="workspace"' in html
    assert "Use action verbs." in html
    assert len(workspace.notifications) == 0


def test_password_strength_lists_unmet_requirements():
    html = render_password_strength_html(validate_password("abc"))

    assert 'id="password-strength"' in html
    for message in validate_password("abc").errors:
        assert message in html


def test_template_picker_marks_selected():
    html = render_templates_html(list(BUILT_IN_TEMPLATES), "classic")

    assert 'id="template-picker"' in html
    assert "Classic Business" in html
