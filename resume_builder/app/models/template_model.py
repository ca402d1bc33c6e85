import logging

from sqlalchemy import JSON, Boolean, Column, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from resume_builder.app.models import Base

log = logging.getLogger(__name__)


class ResumeTemplateRecord(Base):
    """Row in the remote template listing.

    Attributes:
        id (str): Stable template identifier (e.g. 'modern').
        name (str): Display name.
        description (str): Short description shown in the selector.
        template_data (dict): Style metadata: `layout` and `colors.primary`/`colors.secondary`.
        is_premium (bool): Whether the template is marked as premium.

    """

    __tablename__ = "resume_templates"

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    template_data = Column(JSONB().with_variant(JSON, "sqlite"), nullable=True)
    is_premium = Column(Boolean, default=False, nullable=False)
