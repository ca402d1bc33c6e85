import logging

from .common import SectionEntry

log = logging.getLogger(__name__)


class ProjectEntry(SectionEntry):
    """A personal or professional project.

    Attributes:
        id (str): Stable identifier assigned at creation.
        name (str): Project name.
        description (str): What the project does.
        technologies (str): Free-text list of technologies used.
        link (str): Optional URL; empty when not given.

    """

    name: str = ""
    description: str = ""
    technologies: str = ""
    link: str = ""
