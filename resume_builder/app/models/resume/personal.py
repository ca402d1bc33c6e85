import logging

from .common import TextRecord

log = logging.getLogger(__name__)


class PersonalDetails(TextRecord):
    """Contact details and summary shown in the resume header.

    Attributes:
        full_name (str): The full name of the person.
        email (str): Contact email address.
        phone (str): Contact phone number.
        location (str): City, region or country.
        linkedin (str): LinkedIn profile URL.
        portfolio (str): Personal website or portfolio URL.
        summary (str): Free-text professional summary.

    """

    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    portfolio: str = ""
    summary: str = ""
