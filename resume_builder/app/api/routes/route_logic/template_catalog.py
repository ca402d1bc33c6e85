import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_builder.app.models.resume.template import (
    Template,
    TemplateColors,
    TemplateSelection,
    TemplateStyle,
)
from resume_builder.app.models.template_model import ResumeTemplateRecord

log = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "modern"


class TemplateNotFoundError(ValueError):
    """Raised when a template identifier is not in the catalog."""


BUILT_IN_TEMPLATES: tuple[Template, ...] = (
    Template(
        id="modern",
        name="Modern Professional",
        description="Clean and modern design perfect for tech professionals",
        style=TemplateStyle(
            layout="modern",
            colors=TemplateColors(primary="#2563eb", secondary="#64748b"),
        ),
    ),
    Template(
        id="classic",
        name="Classic Business",
        description="Traditional format ideal for corporate positions",
        style=TemplateStyle(
            layout="classic",
            colors=TemplateColors(primary="#1f2937", secondary="#6b7280"),
        ),
    ),
    Template(
        id="creative",
        name="Creative Design",
        description="Eye-catching design for creative professionals",
        style=TemplateStyle(
            layout="creative",
            colors=TemplateColors(primary="#7c3aed", secondary="#a78bfa"),
        ),
        is_premium=True,
    ),
    Template(
        id="minimal",
        name="Minimal Clean",
        description="Simple and clean layout focusing on content",
        style=TemplateStyle(
            layout="minimal",
            colors=TemplateColors(primary="#059669", secondary="#10b981"),
        ),
    ),
)


def template_from_record(record: ResumeTemplateRecord) -> Template:
    """Convert a `resume_templates` row into a Template.

    Args:
        record (ResumeTemplateRecord): The stored template row.

    Returns:
        Template: The template; missing style data falls back to the default colours.

    """
    return Template(
        id=record.id,
        name=record.name,
        description=record.description or "",
        style=TemplateStyle.model_validate(record.template_data or {}),
        is_premium=bool(record.is_premium),
    )


def template_to_record(template: Template) -> ResumeTemplateRecord:
    """Convert a Template into a `resume_templates` row, used when seeding the table."""
    return ResumeTemplateRecord(
        id=template.id,
        name=template.name,
        description=template.description,
        template_data=template.style.model_dump(),
        is_premium=template.is_premium,
    )


def list_templates(db: Session) -> list[Template]:
    """List the available templates.

    Args:
        db (Session): The database session.

    Returns:
        list[Template]: Templates from the `resume_templates` table ordered by
            name, or the built-in catalog when the table is empty or cannot be read.

    Notes:
        1. Query all template rows.
        2. On a database or data error, log it, roll back and use the built-in set.
        3. Templates are cosmetic, so a failed listing never blocks the builder.

    """
    _msg = "list_templates starting"
    log.debug(_msg)
    try:
        records = (
            db.query(ResumeTemplateRecord).order_by(ResumeTemplateRecord.name).all()
        )
        templates = [template_from_record(record) for record in records]
    except (SQLAlchemyError, ValidationError):
        _msg = "Error loading templates, using built-in templates"
        log.exception(_msg)
        db.rollback()
        return list(BUILT_IN_TEMPLATES)

    if not templates:
        _msg = "No stored templates, using built-in templates"
        log.debug(_msg)
        return list(BUILT_IN_TEMPLATES)

    _msg = f"list_templates returning {len(templates)} templates"
    log.debug(_msg)
    return templates


def get_template(templates: list[Template], template_id: str) -> Template:
    """Return the template with the given identifier.

    Raises:
        TemplateNotFoundError: If no template has that identifier.

    """
    for template in templates:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(f"Template '{template_id}' not found")


def select_template(templates: list[Template], template_id: str) -> TemplateSelection:
    """Choose a template, returning its identifier and style metadata.

    Args:
        templates (list[Template]): The loaded catalog.
        template_id (str): The identifier of the chosen template.

    Returns:
        TemplateSelection: The chosen identifier and its style.

    Raises:
        TemplateNotFoundError: If the template does not exist.

    """
    template = get_template(templates, template_id)
    _msg = f"Template selected: {template.id}"
    log.debug(_msg)
    return TemplateSelection(template_id=template.id, style=template.style)


def get_template_style(
    templates: list[Template],
    template_id: str | None,
) -> TemplateStyle:
    """Resolve a possibly unknown template identifier to a style, defaulting to the modern look."""
    if template_id:
        try:
            return get_template(templates, template_id).style
        except TemplateNotFoundError:
            _msg = f"Saved template '{template_id}' is no longer available"
            log.warning(_msg)
    return TemplateStyle()
