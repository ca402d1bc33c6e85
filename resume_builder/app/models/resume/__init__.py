"""
Resume document models.

These pydantic models are the in-memory shape of a resume. They use
snake_case attributes with camelCase aliases so the same classes read and
write the storage shape.

Notes:
1. Models are frozen; edits produce new instances through the section reducers.
2. No disk, network, or database access is performed in this package.
"""

from .common import new_entry_id
from .education import EducationEntry
from .experience import ExperienceEntry
from .personal import PersonalDetails
from .projects import ProjectEntry
from .resume import ResumeDocument, ResumeSection
from .skills import SkillCategory, Skills
from .template import Template, TemplateColors, TemplateSelection, TemplateStyle

__all__ = [
    "EducationEntry",
    "ExperienceEntry",
    "PersonalDetails",
    "ProjectEntry",
    "ResumeDocument",
    "ResumeSection",
    "SkillCategory",
    "Skills",
    "Template",
    "TemplateColors",
    "TemplateSelection",
    "TemplateStyle",
    "new_entry_id",
]
