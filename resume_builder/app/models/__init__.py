import logging

from sqlalchemy.orm import declarative_base

log = logging.getLogger(__name__)

# Base model that other models will inherit from
Base = declarative_base()

# Import all models here to ensure they are registered with SQLAlchemy's metadata
from .one_time_code import OneTimeCode  # noqa
from .resume_model import StoredResume  # noqa
from .template_model import ResumeTemplateRecord  # noqa
from .user import User  # noqa
