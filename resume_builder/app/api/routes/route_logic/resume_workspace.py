import logging
import threading

from sqlalchemy.orm import Session

from resume_builder.app.api.routes.route_logic import resume_sections
from resume_builder.app.api.routes.route_logic.completion import calculate_completion
from resume_builder.app.api.routes.route_logic.resume_persistence import (
    ResumePersistence,
    to_document,
)
from resume_builder.app.api.routes.route_logic.resume_preview import (
    ResumePreview,
    build_resume_preview,
)
from resume_builder.app.api.routes.route_logic.resume_sections import SkillInputBuffer
from resume_builder.app.api.routes.route_logic.template_catalog import (
    DEFAULT_TEMPLATE_ID,
    get_template_style,
    select_template,
)
from resume_builder.app.core.auth import AuthSession
from resume_builder.app.core.notifications import NotificationLog
from resume_builder.app.models.resume.common import SectionEntry
from resume_builder.app.models.resume.resume import (
    LIST_SECTION_ENTRY_TYPES,
    ResumeDocument,
    ResumeSection,
)
from resume_builder.app.models.resume.skills import SkillCategory
from resume_builder.app.models.resume.template import Template, TemplateSelection

log = logging.getLogger(__name__)


def _list_section(section: ResumeSection | str) -> ResumeSection:
    section = ResumeSection(section)
    if section not in LIST_SECTION_ENTRY_TYPES:
        raise ValueError(f"'{section.value}' is not a list section")
    return section


class ResumeWorkspace:
    """The live resume of one signed-in account.

    The workspace owns the only authoritative copy of the document. Every
    edit goes through a section reducer and replaces one slice of it.

    Attributes:
        session (AuthSession): The owning account.
        notifications (NotificationLog): Pending user-visible messages.
        persistence (ResumePersistence): Loads and saves the stored resume.
        document (ResumeDocument): The current, possibly unsaved, content.
        skill_input (SkillInputBuffer): Skill text typed but not yet added.
        template_id (str): The selected template.
        is_loaded (bool): True once the stored resume has been read.
        has_unsaved_changes (bool): True after an edit or template choice that is not yet saved.

    """

    def __init__(self, session: AuthSession, notifications: NotificationLog | None = None):
        self.session = session
        self.notifications = notifications or NotificationLog()
        self.persistence = ResumePersistence(session, self.notifications)
        self.document = ResumeDocument()
        self.skill_input = SkillInputBuffer()
        self.template_id = DEFAULT_TEMPLATE_ID
        self.is_loaded = False
        self.has_unsaved_changes = False

    def load(self, db: Session) -> bool:
        """Read the current stored resume into the workspace.

        Notes:
            1. On failure the document in memory is kept as it was.
            2. When the workspace already holds unsaved edits (made after an
               earlier failed load) they are kept; only the stored resume is
               adopted as the save target.

        """
        if not self.persistence.load(db):
            return False
        current = self.persistence.current
        if self.has_unsaved_changes:
            _msg = f"Keeping unsaved edits of user {self.session.user_id} over the stored resume"
            log.info(_msg)
        else:
            self.document = to_document(current)
            self.template_id = current.template_id or DEFAULT_TEMPLATE_ID
        self.is_loaded = True
        return True

    @property
    def completion(self) -> int:
        return calculate_completion(self.document)

    @property
    def is_saving(self) -> bool:
        return self.persistence.is_saving

    @property
    def is_loading(self) -> bool:
        return self.persistence.is_loading

    def update_section(self, section: ResumeSection | str, value) -> ResumeDocument:
        """Replace one top-level section of the document."""
        section = ResumeSection(section)
        self.document = self.document.model_copy(update={section.value: value})
        self.has_unsaved_changes = True
        return self.document

    def update_personal(self, field: str, value: str) -> ResumeDocument:
        details = resume_sections.update_personal_details(
            self.document.personal_details,
            field,
            value,
        )
        return self.update_section(ResumeSection.PERSONAL_DETAILS, details)

    def add_entry(self, section: ResumeSection | str) -> SectionEntry:
        """Append an empty entry to a list section and return it."""
        section = _list_section(section)
        entries = resume_sections.add_entry(
            getattr(self.document, section.value),
            LIST_SECTION_ENTRY_TYPES[section],
        )
        self.update_section(section, entries)
        return entries[-1]

    def update_entry(
        self,
        section: ResumeSection | str,
        entry_id: str,
        field: str,
        value: str,
    ) -> ResumeDocument:
        section = _list_section(section)
        current = getattr(self.document, section.value)
        if current:
            entries = resume_sections.update_entry(current, entry_id, field, value)
        else:
            # Validate the field name even when there is nothing to update.
            LIST_SECTION_ENTRY_TYPES[section].resolve_field(field)
            entries = current
        return self.update_section(section, entries)

    def remove_entry(self, section: ResumeSection | str, entry_id: str) -> ResumeDocument:
        section = _list_section(section)
        entries = resume_sections.remove_entry(getattr(self.document, section.value), entry_id)
        return self.update_section(section, entries)

    def set_skill_input(self, category: SkillCategory | str, value: str) -> None:
        self.skill_input.set(category, value)

    def commit_skill(self, category: SkillCategory | str) -> ResumeDocument:
        skills = self.skill_input.commit(category, self.document.skills)
        return self.update_section(ResumeSection.SKILLS, skills)

    def handle_skill_key(self, category: SkillCategory | str, key: str) -> ResumeDocument:
        skills = self.skill_input.handle_key(category, key, self.document.skills)
        return self.update_section(ResumeSection.SKILLS, skills)

    def remove_skill(self, category: SkillCategory | str, value: str) -> ResumeDocument:
        skills = resume_sections.remove_skill(self.document.skills, category, value)
        return self.update_section(ResumeSection.SKILLS, skills)

    def select_template(self, templates: list[Template], template_id: str) -> TemplateSelection:
        """Choose a template for preview and export.

        Raises:
            TemplateNotFoundError: If the template is not in `templates`.

        """
        selection = select_template(templates, template_id)
        self.template_id = selection.template_id
        self.has_unsaved_changes = True
        return selection

    def preview(self, templates: list[Template]) -> ResumePreview:
        return build_resume_preview(
            self.document,
            get_template_style(templates, self.template_id),
        )

    def save(self, db: Session) -> bool:
        """Store the document and the selected template; the document is kept on failure."""
        saved = self.persistence.save(db, self.document, template_id=self.template_id)
        if saved:
            self.has_unsaved_changes = False
        return saved


class WorkspaceRegistry:
    """The open workspaces, one per signed-in account."""

    def __init__(self):
        self._workspaces: dict[int, ResumeWorkspace] = {}
        self._lock = threading.Lock()

    def open(self, session: AuthSession, db: Session) -> ResumeWorkspace:
        """Return the account's workspace, creating and loading it if needed.

        Notes:
            1. Called when a session starts; an existing workspace is reused.
            2. A workspace whose load failed is loaded again.

        """
        with self._lock:
            workspace = self._workspaces.get(session.user_id)
            if workspace is None:
                _msg = f"Opening workspace for user {session.user_id}"
                log.debug(_msg)
                workspace = ResumeWorkspace(session)
                self._workspaces[session.user_id] = workspace

        if not workspace.is_loaded:
            workspace.load(db)
        return workspace

    def close(self, user_id: int) -> None:
        with self._lock:
            if self._workspaces.pop(user_id, None) is not None:
                _msg = f"Closed workspace for user {user_id}"
                log.debug(_msg)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._workspaces

    def __len__(self) -> int:
        return len(self._workspaces)


_registry = WorkspaceRegistry()


def get_workspace_registry() -> WorkspaceRegistry:
    """Dependency returning the process-wide workspace registry."""
    return _registry
