import logging

from pydantic import BaseModel

from resume_builder.app.models.resume.resume import ResumeDocument
from resume_builder.app.models.resume.skills import SkillCategory
from resume_builder.app.models.resume.template import TemplateStyle

log = logging.getLogger(__name__)

NAME_PLACEHOLDER = "Your Full Name"
PLACEHOLDER_TITLE = "Your resume preview will appear here"
PLACEHOLDER_HINT = "Start by filling out your personal details in the form"

SKILL_GROUP_LABELS = {
    SkillCategory.TECHNICAL: "Technical Skills",
    SkillCategory.LANGUAGES: "Programming Languages",
    SkillCategory.FRAMEWORKS: "Frameworks & Libraries",
    SkillCategory.TOOLS: "Tools & Technologies",
}


class PreviewEntry(BaseModel):
    """One rendered entry of a list section.

    Attributes:
        heading (str): Main line (degree, job title or project name).
        subheading (str): Second line (institution, or company with location).
        meta (str): Right-aligned text such as the year or duration.
        link (str): Project link, empty when absent.
        details (list[str]): Extra labelled lines such as "GPA: 3.8".
        description (str): Free-text body, empty when absent.

    """

    heading: str = ""
    subheading: str = ""
    meta: str = ""
    link: str = ""
    details: list[str] = []
    description: str = ""


class PreviewSection(BaseModel):
    """A titled list section."""

    key: str
    title: str
    entries: list[PreviewEntry]


class SkillGroup(BaseModel):
    """A labelled, comma-joined skill category."""

    label: str
    skills: list[str]

    @property
    def text(self) -> str:
        return ", ".join(self.skills)


class PreviewPlaceholder(BaseModel):
    """Prompt shown while the personal details are still empty."""

    title: str = PLACEHOLDER_TITLE
    hint: str = PLACEHOLDER_HINT


class ResumePreview(BaseModel):
    """Structured view of a resume, ready for markup.

    Attributes:
        name (str): Full name, or a placeholder name.
        contact (list[str]): Non-empty email, phone and location, in that order.
        links (list[str]): Non-empty LinkedIn and portfolio links.
        summary (str): Professional summary, empty when absent.
        sections (list[PreviewSection]): Non-empty list sections in document order.
        skill_groups (list[SkillGroup]): Non-empty skill categories.
        placeholder (PreviewPlaceholder | None): Set when name and email are both empty.
        style (TemplateStyle): Layout and colours to apply.

    """

    name: str
    contact: list[str] = []
    links: list[str] = []
    summary: str = ""
    sections: list[PreviewSection] = []
    skill_groups: list[SkillGroup] = []
    placeholder: PreviewPlaceholder | None = None
    style: TemplateStyle = TemplateStyle()


def _education_entries(document: ResumeDocument) -> list[PreviewEntry]:
    return [
        PreviewEntry(
            heading=entry.degree,
            subheading=entry.institution,
            meta=entry.year,
            details=[f"GPA: {entry.gpa}"] if entry.gpa else [],
        )
        for entry in document.education
    ]


def _experience_entries(document: ResumeDocument) -> list[PreviewEntry]:
    entries = []
    for entry in document.experience:
        subheading = entry.company
        if entry.location:
            subheading = f"{entry.company}, {entry.location}"
        entries.append(
            PreviewEntry(
                heading=entry.title,
                subheading=subheading,
                meta=entry.duration,
                description=entry.description,
            ),
        )
    return entries


def _project_entries(document: ResumeDocument) -> list[PreviewEntry]:
    return [
        PreviewEntry(
            heading=entry.name,
            link=entry.link,
            details=(
                [f"Technologies: {entry.technologies}"] if entry.technologies else []
            ),
            description=entry.description,
        )
        for entry in document.projects
    ]


def build_resume_preview(
    document: ResumeDocument,
    style: TemplateStyle | None = None,
) -> ResumePreview:
    """Project a resume document into its rendered view.

    Args:
        document (ResumeDocument): The resume to render.
        style (TemplateStyle | None): Style of the selected template; the default look when None.

    Returns:
        ResumePreview: The structured view.

    Notes:
        1. The header uses the full name or a placeholder name, and lists only non-empty contact items and links.
        2. Summary, education, experience and projects appear only when they have content.
        3. List entries keep document order; GPA, location and link appear only when non-empty.
        4. The skills block lists only non-empty categories.
        5. When both name and email are empty a placeholder prompt is attached.
        6. This function is pure: no disk, network or database access.

    """
    personal = document.personal_details

    sections = []
    for key, title, entries in (
        ("education", "Education", _education_entries(document)),
        ("experience", "Work Experience", _experience_entries(document)),
        ("projects", "Projects", _project_entries(document)),
    ):
        if entries:
            sections.append(PreviewSection(key=key, title=title, entries=entries))

    skill_groups = [
        SkillGroup(label=label, skills=document.skills.get(category))
        for category, label in SKILL_GROUP_LABELS.items()
        if document.skills.get(category)
    ]

    placeholder = None
    if not personal.full_name and not personal.email:
        placeholder = PreviewPlaceholder()

    return ResumePreview(
        name=personal.full_name or NAME_PLACEHOLDER,
        contact=[v for v in (personal.email, personal.phone, personal.location) if v],
        links=[v for v in (personal.linkedin, personal.portfolio) if v],
        summary=personal.summary,
        sections=sections,
        skill_groups=skill_groups,
        placeholder=placeholder,
        style=style or TemplateStyle(),
    )
