import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_builder.app.api.routes.route_logic.resume_crud import (
    ResumeCreateParams,
    ResumeUpdateParams,
    create_resume,
    get_resume_by_id_and_user,
    get_user_resumes,
    update_resume,
)
from resume_builder.app.core.auth import AuthSession
from resume_builder.app.core.notifications import NotificationLog
from resume_builder.app.models.resume.resume import ResumeDocument
from resume_builder.app.models.resume.skills import SkillCategory

log = logging.getLogger(__name__)

_save_locks: dict[int, tuple[threading.Lock, int]] = {}
_save_locks_guard = threading.Lock()


@contextmanager
def _save_lock(resume_id: int) -> Iterator[None]:
    """Hold the save lock of one resume.

    Each entry counts the saves holding or waiting for its lock and is
    dropped when the last of them finishes.
    """
    with _save_locks_guard:
        lock, users = _save_locks.get(resume_id, (threading.Lock(), 0))
        _save_locks[resume_id] = (lock, users + 1)
    try:
        with lock:
            yield
    finally:
        with _save_locks_guard:
            lock, users = _save_locks[resume_id]
            if users == 1:
                del _save_locks[resume_id]
            else:
                _save_locks[resume_id] = (lock, users - 1)


class StoredResumeSnapshot(BaseModel):
    """A detached copy of a `resumes` row.

    Holding snapshots instead of ORM instances keeps cached state valid
    after the request's database session is closed.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str = "My Resume"
    personal_details: Any = None
    education: Any = None
    experience: Any = None
    projects: Any = None
    skills: Any = None
    template_id: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _dict_entries(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _skills_record(value: Any) -> dict[str, list]:
    if not isinstance(value, dict):
        return {}
    return {
        category.value: value[category.value]
        for category in SkillCategory
        if isinstance(value.get(category.value), list)
    }


def to_document(stored: StoredResumeSnapshot | None) -> ResumeDocument:
    """Convert a stored resume into a resume document.

    Args:
        stored (StoredResumeSnapshot | None): The stored resume, or None.

    Returns:
        ResumeDocument: An all-empty document for None; otherwise the stored
            content with every missing, null or malformed field replaced by
            its empty default.

    Notes:
        1. Entries that are not JSON objects are dropped.
        2. Skill categories that are not lists are treated as empty.
        3. Converting a document to columns and back yields an equal document.

    """
    if stored is None:
        return ResumeDocument()

    personal = stored.personal_details if isinstance(stored.personal_details, dict) else {}
    try:
        return ResumeDocument.model_validate(
            {
                "personalDetails": personal,
                "education": _dict_entries(stored.education),
                "experience": _dict_entries(stored.experience),
                "projects": _dict_entries(stored.projects),
                "skills": _skills_record(stored.skills),
            },
        )
    except ValidationError:
        _msg = f"Stored resume {stored.id} has unreadable content, using an empty document"
        log.exception(_msg)
        return ResumeDocument()


def document_to_columns(document: ResumeDocument) -> dict[str, Any]:
    """Serialize a document into the JSON column values of a `resumes` row."""
    return {
        "personal_details": document.personal_details.model_dump(by_alias=True),
        "education": [e.model_dump(by_alias=True) for e in document.education],
        "experience": [e.model_dump(by_alias=True) for e in document.experience],
        "projects": [e.model_dump(by_alias=True) for e in document.projects],
        "skills": document.skills.model_dump(by_alias=True),
    }


class ResumePersistence:
    """Loads and saves the resumes of one signed-in account.

    Attributes:
        session (AuthSession | None): The account the resumes belong to.
        notifications (NotificationLog): Receives user-visible outcomes.
        resumes (list[StoredResumeSnapshot]): The account's resumes, most recent first.
        current (StoredResumeSnapshot | None): The resume being edited.
        is_loading (bool): True while `load` runs.
        is_saving (bool): True while `save` runs.

    """

    def __init__(self, session: AuthSession | None, notifications: NotificationLog):
        self.session = session
        self.notifications = notifications
        self.resumes: list[StoredResumeSnapshot] = []
        self.current: StoredResumeSnapshot | None = None
        self.is_loading = False
        self.is_saving = False

    def load(self, db: Session) -> bool:
        """Fetch the account's resumes and select the most recent one.

        Args:
            db (Session): The database session.

        Returns:
            bool: True when `current` now reflects storage.

        Notes:
            1. Without a session nothing is loaded.
            2. List the account's resumes, most recent first.
            3. If there are none, create one; otherwise the first becomes current.
            4. On a database error, roll back, notify, and keep the previous
               `resumes` and `current` as they were.
            5. `is_loading` is False again when this returns.

        """
        if self.session is None:
            return False

        _msg = f"Loading resumes for user {self.session.user_id}"
        log.debug(_msg)
        self.is_loading = True
        try:
            rows = get_user_resumes(db, user_id=self.session.user_id)
            resumes = [StoredResumeSnapshot.model_validate(row) for row in rows]
        except SQLAlchemyError:
            _msg = "Error loading resumes"
            log.exception(_msg)
            db.rollback()
            self.notifications.error("Error loading resumes", "Please try refreshing the page.")
            self.is_loading = False
            return False

        try:
            self.resumes = resumes
            if resumes:
                self.current = resumes[0]
                return True
            return self.create(db) is not None
        finally:
            self.is_loading = False

    def create(self, db: Session, title: str = "My Resume") -> StoredResumeSnapshot | None:
        """Create an empty resume and make it current.

        Returns:
            StoredResumeSnapshot | None: The new resume, or None without a session or on a database error.

        """
        if self.session is None:
            return None

        try:
            row = create_resume(
                db,
                ResumeCreateParams(user_id=self.session.user_id, title=title),
            )
            created = StoredResumeSnapshot.model_validate(row)
        except SQLAlchemyError:
            _msg = "Error creating resume"
            log.exception(_msg)
            db.rollback()
            self.notifications.error("Error creating resume", "Please try again.")
            return None

        self.current = created
        self.resumes = [created, *self.resumes]
        self.notifications.notify(
            "New resume created",
            "You can now start building your resume.",
        )
        return created

    def save(
        self,
        db: Session,
        document: ResumeDocument,
        template_id: str | None = None,
    ) -> bool:
        """Write a document to the current resume.

        Args:
            db (Session): The database session.
            document (ResumeDocument): The content to store.
            template_id (str | None): The selected template; None keeps the stored one.

        Returns:
            bool: True if the resume was written.

        Notes:
            1. Without a session or a current resume nothing is written.
            2. Saves of the same resume run one at a time; the last write wins.
            3. All document fields and the update time are written, then the list is reloaded.
            4. On a database error, roll back and notify. The document is not
               modified here, so the caller keeps its unsaved edits.
            5. `is_saving` is False again when this returns.

        """
        if self.session is None or self.current is None:
            _msg = "Save requested without a session or current resume"
            log.warning(_msg)
            return False

        resume_id = self.current.id
        self.is_saving = True
        try:
            with _save_lock(resume_id):
                row = get_resume_by_id_and_user(
                    db,
                    resume_id=resume_id,
                    user_id=self.session.user_id,
                )
                update_resume(
                    db,
                    row,
                    ResumeUpdateParams(
                        **document_to_columns(document),
                        template_id=template_id,
                    ),
                )
        except SQLAlchemyError:
            _msg = f"Error saving resume {resume_id}"
            log.exception(_msg)
            db.rollback()
            self.notifications.error("Error saving resume", "Please try again.")
            return False
        else:
            _msg = f"Resume {resume_id} saved"
            log.debug(_msg)
            self.notifications.notify(
                "Resume saved",
                "Your changes have been saved successfully.",
            )
            self.load(db)
            return True
        finally:
            self.is_saving = False
