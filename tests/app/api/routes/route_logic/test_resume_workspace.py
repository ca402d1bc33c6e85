from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from resume_builder.app.api.routes.route_logic.resume_workspace import (
    ResumeWorkspace,
    WorkspaceRegistry,
)
from resume_builder.app.api.routes.route_logic.template_catalog import (
    BUILT_IN_TEMPLATES,
    TemplateNotFoundError,
)
from resume_builder.app.core.auth import AuthSession
from resume_builder.app.models.resume.resume import ResumeSection
from resume_builder.app.models.resume.skills import SkillCategory
from resume_builder.app.models.resume_model import StoredResume


@pytest.fixture
def session(verified_user) -> AuthSession:
    return AuthSession.from_user(verified_user)


@pytest.fixture
def workspace(session, db_session) -> ResumeWorkspace:
    workspace = ResumeWorkspace(session)
    assert workspace.load(db_session)
    workspace.notifications.drain()
    return workspace


def test_load_creates_first_resume(session, db_session):
    workspace = ResumeWorkspace(session)

    assert workspace.load(db_session) is True

    assert workspace.is_loaded
    assert workspace.template_id == "modern"
    assert workspace.completion == 0
    assert db_session.query(StoredResume).filter(StoredResume.user_id == session.user_id).count() == 1
    assert [n.title for n in workspace.notifications.drain()] == ["New resume created"]


def test_load_failure_keeps_document(session):
    workspace = ResumeWorkspace(session)
    workspace.update_personal("fullName", "Unsaved Name")
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

    assert workspace.load(db) is False

    assert workspace.is_loaded is False
    assert workspace.document.personal_details.full_name == "Unsaved Name"
    assert workspace.notifications.pending[0].title == "Error loading resumes"


def test_personal_update_replaces_document(workspace):
    before = workspace.document

    after = workspace.update_personal("email", "jane@example.com")

    assert after is workspace.document
    assert after is not before
    assert before.personal_details.email == ""
    assert after.personal_details.email == "jane@example.com"


def test_entry_lifecycle(workspace):
    entry = workspace.add_entry("experience")
    workspace.update_entry(ResumeSection.EXPERIENCE, entry.id, "company", "Acme")

    assert workspace.document.experience[0].company == "Acme"
    assert workspace.completion == 20

    workspace.remove_entry("experience", entry.id)
    assert workspace.document.experience == []


def test_entry_operations_reject_non_list_sections(workspace):
    with pytest.raises(ValueError):
        workspace.add_entry("skills")
    with pytest.raises(ValueError):
        workspace.add_entry("hobbies")


def test_update_entry_on_empty_section_checks_field(workspace):
    workspace.update_entry("projects", "missing", "name", "Ignored")
    assert workspace.document.projects == []

    with pytest.raises(ValueError):
        workspace.update_entry("projects", "missing", "salary", "1")


def test_skill_input_committed_on_enter(workspace):
    workspace.set_skill_input(SkillCategory.LANGUAGES, "Python")

    workspace.handle_skill_key("languages", "a")
    assert workspace.document.skills.languages == []

    workspace.handle_skill_key("languages", "Enter")
    assert workspace.document.skills.languages == ["Python"]
    assert workspace.skill_input.get(SkillCategory.LANGUAGES) == ""

    workspace.remove_skill("languages", "Python")
    assert workspace.document.skills.languages == []


def test_select_template(workspace):
    selection = workspace.select_template(list(BUILT_IN_TEMPLATES), "classic")

    assert selection.template_id == "classic"
    assert workspace.template_id == "classic"
    assert workspace.preview(list(BUILT_IN_TEMPLATES)).style.layout == "classic"


def test_select_unknown_template_keeps_selection(workspace):
    with pytest.raises(TemplateNotFoundError):
        workspace.select_template(list(BUILT_IN_TEMPLATES), "missing")
    assert workspace.template_id == "modern"


def test_save_then_reload(workspace, session, db_session):
    workspace.update_personal("fullName", "Jane Doe")
    workspace.select_template(list(BUILT_IN_TEMPLATES), "minimal")

    assert workspace.save(db_session) is True
    assert workspace.is_saving is False

    reloaded = ResumeWorkspace(session)
    reloaded.load(db_session)
    assert reloaded.document == workspace.document
    assert reloaded.template_id == "minimal"


def test_registry_reuses_workspace(registry, session, db_session):
    first = registry.open(session, db_session)
    second = registry.open(session, db_session)

    assert first is second
    assert session.user_id in registry
    assert len(registry) == 1


def test_registry_close(registry, session, db_session):
    first = registry.open(session, db_session)
    registry.close(session.user_id)
    registry.close(session.user_id)

    assert session.user_id not in registry
    assert registry.open(session, db_session) is not first


def test_registry_retries_failed_load(registry, session, db_session):
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
    workspace = registry.open(session, db)
    assert workspace.is_loaded is False

    assert registry.open(session, db_session) is workspace
    assert workspace.is_loaded is True


def test_retried_load_keeps_unsaved_edits(registry, session, db_session):
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
    workspace = registry.open(session, db)
    workspace.update_personal("fullName", "Unsaved Name")
    workspace.add_entry("education")
    workspace.select_template(list(BUILT_IN_TEMPLATES), "classic")

    assert registry.open(session, db_session) is workspace

    assert workspace.is_loaded is True
    assert workspace.document.personal_details.full_name == "Unsaved Name"
    assert len(workspace.document.education) == 1
    assert workspace.template_id == "classic"
    assert workspace.persistence.current is not None

    assert workspace.save(db_session) is True
    stored = db_session.query(StoredResume).filter(StoredResume.user_id == session.user_id).one()
    assert stored.personal_details["fullName"] == "Unsaved Name"
    assert stored.template_id == "classic"


def test_unsaved_changes_flag(workspace, db_session):
    assert workspace.has_unsaved_changes is False

    workspace.update_personal("email", "jane@example.com")
    assert workspace.has_unsaved_changes is True

    assert workspace.save(db_session) is True
    assert workspace.has_unsaved_changes is False


def test_failed_save_keeps_unsaved_changes_flag(workspace):
    workspace.update_personal("email", "jane@example.com")
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

    assert workspace.save(db) is False

    assert workspace.has_unsaved_changes is True
    assert workspace.document.personal_details.email == "jane@example.com"
