import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from resume_builder.app.models import Base

log = logging.getLogger(__name__)

JSONType = JSONB().with_variant(JSON, "sqlite")


def empty_skills() -> dict[str, list[str]]:
    """Return the storage shape of an empty skills record."""
    return {"technical": [], "languages": [], "frameworks": [], "tools": []}


@dataclass
class StoredResumeData:
    """Dataclass to hold data for StoredResume initialization."""

    user_id: int
    title: str = "My Resume"
    personal_details: dict[str, Any] = field(default_factory=dict)
    education: list[dict[str, Any]] = field(default_factory=list)
    experience: list[dict[str, Any]] = field(default_factory=list)
    projects: list[dict[str, Any]] = field(default_factory=list)
    skills: dict[str, list[str]] = field(default_factory=empty_skills)
    template_id: str | None = None
    is_active: bool = True


class StoredResume(Base):
    """Persisted form of a resume document.

    Section columns hold JSON in the client storage shape (camelCase keys).

    Attributes:
        id (int): Unique identifier for the resume.
        user_id (int): Foreign key to the owning User.
        title (str): User-visible resume title.
        personal_details (dict): Personal details record.
        education (list[dict]): Education entries in display order.
        experience (list[dict]): Experience entries in display order.
        projects (list[dict]): Project entries in display order.
        skills (dict): Skill categories, each a list of strings.
        template_id (str | None): Identifier of the selected template.
        is_active (bool): Whether the resume is currently active.
        created_at (datetime): Timestamp when the resume was created.
        updated_at (datetime): Timestamp of the most recent save.

    """

    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False, default="My Resume")
    personal_details = Column(JSONType, nullable=True)
    education = Column(JSONType, nullable=True)
    experience = Column(JSONType, nullable=True)
    projects = Column(JSONType, nullable=True)
    skills = Column(JSONType, nullable=True)
    template_id = Column(String(64), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user = relationship("User", back_populates="resumes")

    def __init__(self, data: StoredResumeData):
        """Initialize a StoredResume instance.

        Args:
            data (StoredResumeData): An object containing the data for the new resume.

        Returns:
            None

        Notes:
            1. Assigns attributes from the `data` object to the instance.
            2. This constructor does not perform validation.
            3. This function does not perform disk, network, or database access.

        """
        _msg = f"Initializing StoredResume '{data.title}' for user {data.user_id}"
        log.debug(_msg)

        self.user_id = data.user_id
        self.title = data.title
        self.personal_details = data.personal_details
        self.education = data.education
        self.experience = data.experience
        self.projects = data.projects
        self.skills = data.skills
        self.template_id = data.template_id
        self.is_active = data.is_active
