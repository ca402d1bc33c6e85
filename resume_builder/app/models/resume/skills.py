import logging
from enum import Enum
from typing import Any

from pydantic import field_validator

from .common import ResumeRecord

log = logging.getLogger(__name__)


class SkillCategory(str, Enum):
    """The independent skill lists of a resume."""

    TECHNICAL = "technical"
    LANGUAGES = "languages"
    FRAMEWORKS = "frameworks"
    TOOLS = "tools"


class Skills(ResumeRecord):
    """Four independent sets of skills, each kept in insertion order.

    Attributes:
        technical (list[str]): Technical skills.
        languages (list[str]): Programming languages.
        frameworks (list[str]): Frameworks and libraries.
        tools (list[str]): Tools and platforms.

    """

    technical: list[str] = []
    languages: list[str] = []
    frameworks: list[str] = []
    tools: list[str] = []

    @field_validator("*", mode="before")
    @classmethod
    def unique_in_order(cls, v: Any):
        """Treat null as empty and drop blank or repeated values, keeping first occurrences."""
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        seen: list[str] = []
        for item in v:
            if isinstance(item, str) and item.strip() and item not in seen:
                seen.append(item)
        return seen

    def get(self, category: SkillCategory) -> list[str]:
        return getattr(self, SkillCategory(category).value)

    def is_empty(self) -> bool:
        return not any(self.get(category) for category in SkillCategory)
