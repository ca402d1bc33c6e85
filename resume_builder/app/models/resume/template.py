import logging

from pydantic import BaseModel, ConfigDict

log = logging.getLogger(__name__)

DEFAULT_PRIMARY_COLOR = "#2563eb"
DEFAULT_SECONDARY_COLOR = "#64748b"


class TemplateColors(BaseModel):
    """Colour pair applied to headings and accents."""

    model_config = ConfigDict(frozen=True)

    primary: str = DEFAULT_PRIMARY_COLOR
    secondary: str = DEFAULT_SECONDARY_COLOR


class TemplateStyle(BaseModel):
    """Style metadata of a template.

    Attributes:
        layout (str): Layout tag, e.g. 'modern' or 'classic'.
        colors (TemplateColors): Primary and secondary colours.

    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    layout: str = "modern"
    colors: TemplateColors = TemplateColors()


class Template(BaseModel):
    """A cosmetic style preset.

    Attributes:
        id (str): Template identifier.
        name (str): Display name.
        description (str): Short description.
        style (TemplateStyle): Layout and colours.
        is_premium (bool): Premium flag, shown as a badge.

    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    style: TemplateStyle = TemplateStyle()
    is_premium: bool = False


class TemplateSelection(BaseModel):
    """The identifier and style handed back when a template is chosen."""

    model_config = ConfigDict(frozen=True)

    template_id: str
    style: TemplateStyle
