import logging

from .common import SectionEntry

log = logging.getLogger(__name__)


class EducationEntry(SectionEntry):
    """A degree or programme.

    Attributes:
        id (str): Stable identifier assigned at creation.
        degree (str): Degree or programme name.
        institution (str): School or university.
        year (str): Graduation year or period, as entered.
        gpa (str): Optional grade point average; empty when not given.

    """

    degree: str = ""
    institution: str = ""
    year: str = ""
    gpa: str = ""
