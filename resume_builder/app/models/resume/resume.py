import logging
from enum import Enum

from pydantic import field_validator

from .common import ResumeRecord
from .education import EducationEntry
from .experience import ExperienceEntry
from .personal import PersonalDetails
from .projects import ProjectEntry
from .skills import Skills

log = logging.getLogger(__name__)


class ResumeSection(str, Enum):
    """Top-level sections of a resume document."""

    PERSONAL_DETAILS = "personal_details"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    SKILLS = "skills"


LIST_SECTION_ENTRY_TYPES = {
    ResumeSection.EDUCATION: EducationEntry,
    ResumeSection.EXPERIENCE: ExperienceEntry,
    ResumeSection.PROJECTS: ProjectEntry,
}


class ResumeDocument(ResumeRecord):
    """
    The in-memory aggregate of all resume content.

    Attributes:
        personal_details (PersonalDetails): Name, contact details, links and summary.
        education (list[EducationEntry]): Education entries in display order.
        experience (list[ExperienceEntry]): Work experience in display order.
        projects (list[ProjectEntry]): Projects in display order.
        skills (Skills): Skill categories.

    """

    personal_details: PersonalDetails = PersonalDetails()
    education: list[EducationEntry] = []
    experience: list[ExperienceEntry] = []
    projects: list[ProjectEntry] = []
    skills: Skills = Skills()

    @field_validator("education", "experience", "projects", mode="before")
    @classmethod
    def list_or_empty(cls, v):
        return [] if v is None else v

    @field_validator("personal_details", "skills", mode="before")
    @classmethod
    def record_or_empty(cls, v):
        return {} if v is None else v
