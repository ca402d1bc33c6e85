import logging
from typing import TypeVar

from resume_builder.app.models.resume.common import SectionEntry, new_entry_id
from resume_builder.app.models.resume.personal import PersonalDetails
from resume_builder.app.models.resume.skills import SkillCategory, Skills

log = logging.getLogger(__name__)

EntryT = TypeVar("EntryT", bound=SectionEntry)

ENTER_KEY = "Enter"


def add_entry(entries: list[EntryT], entry_type: type[EntryT]) -> list[EntryT]:
    """Append a new, empty entry with a fresh identifier.

    Args:
        entries (list[EntryT]): The current entries of a list section.
        entry_type (type[EntryT]): The entry model for the section.

    Returns:
        list[EntryT]: A new list ending with the new entry.

    """
    entry = entry_type(id=new_entry_id())
    _msg = f"Adding {entry_type.__name__} {entry.id}"
    log.debug(_msg)
    return [*entries, entry]


def update_entry(
    entries: list[EntryT],
    entry_id: str,
    field: str,
    value: str,
) -> list[EntryT]:
    """Set one field of the entry whose identifier matches.

    Args:
        entries (list[EntryT]): The current entries of a list section.
        entry_id (str): Identifier of the entry to change.
        field (str): Attribute name or camelCase alias of the field to set.
        value (str): The new value.

    Returns:
        list[EntryT]: A new list in the same order; only the matching entry is replaced.

    Raises:
        ValueError: If `field` is not a field of the entry type, or is `id`.

    Notes:
        1. Entries whose identifier differs are carried over unchanged.
        2. An unknown identifier leaves the list unchanged.

    """
    if not entries:
        return []

    name = type(entries[0]).resolve_field(field)
    if name == "id":
        raise ValueError("Entry identifiers cannot be changed")

    return [
        entry.model_copy(update={name: value}) if entry.id == entry_id else entry
        for entry in entries
    ]


def remove_entry(entries: list[EntryT], entry_id: str) -> list[EntryT]:
    """Drop the entry whose identifier matches; a missing identifier is a no-op."""
    return [entry for entry in entries if entry.id != entry_id]


def update_personal_details(
    details: PersonalDetails,
    field: str,
    value: str,
) -> PersonalDetails:
    """Set one field of the personal details record.

    Raises:
        ValueError: If `field` is not a personal details field.

    """
    name = PersonalDetails.resolve_field(field)
    return details.model_copy(update={name: value})


def add_skill(skills: Skills, category: SkillCategory, value: str) -> Skills:
    """Add a skill to a category.

    Args:
        skills (Skills): The current skills.
        category (SkillCategory): The category to add to.
        value (str): The skill text; surrounding whitespace is ignored.

    Returns:
        Skills: New skills with the value appended, or the same object when
            the value is blank or already present in the category.

    """
    category = SkillCategory(category)
    skill = value.strip()
    current = skills.get(category)
    if not skill or skill in current:
        return skills
    return skills.model_copy(update={category.value: [*current, skill]})


def remove_skill(skills: Skills, category: SkillCategory, value: str) -> Skills:
    """Remove a skill from a category."""
    category = SkillCategory(category)
    return skills.model_copy(
        update={category.value: [s for s in skills.get(category) if s != value]},
    )


class SkillInputBuffer:
    """Pending, not yet added skill text, one string per category.

    The buffer is transient input state and never part of a resume document.
    """

    def __init__(self):
        self._pending: dict[SkillCategory, str] = {c: "" for c in SkillCategory}

    def get(self, category: SkillCategory) -> str:
        return self._pending[SkillCategory(category)]

    def set(self, category: SkillCategory, value: str) -> None:
        self._pending[SkillCategory(category)] = value

    def commit(self, category: SkillCategory, skills: Skills) -> Skills:
        """Add the pending text of a category to `skills`.

        Returns:
            Skills: The updated skills. When the pending text was added the
                buffer for the category is cleared; a blank or duplicate value
                leaves both the skills and the buffer as they were.

        """
        category = SkillCategory(category)
        updated = add_skill(skills, category, self._pending[category])
        if updated is not skills:
            self._pending[category] = ""
        return updated

    def handle_key(self, category: SkillCategory, key: str, skills: Skills) -> Skills:
        """Commit on the Enter key; any other key leaves everything unchanged."""
        if key == ENTER_KEY:
            return self.commit(category, skills)
        return skills

    def as_dict(self) -> dict[str, str]:
        return {category.value: text for category, text in self._pending.items()}
