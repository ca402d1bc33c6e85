import logging

from .common import SectionEntry

log = logging.getLogger(__name__)


class ExperienceEntry(SectionEntry):
    """A position held.

    Attributes:
        id (str): Stable identifier assigned at creation.
        title (str): Job title.
        company (str): Employer.
        duration (str): Free-text period, e.g. "Jan 2020 - Present".
        description (str): Responsibilities and achievements.
        location (str): Optional work location; empty when not given.

    """

    title: str = ""
    company: str = ""
    duration: str = ""
    description: str = ""
    location: str = ""
