import logging

from resume_builder.app.models.resume.resume import ResumeDocument

log = logging.getLogger(__name__)

COMPLETION_CHECK_COUNT = 5


def calculate_completion(document: ResumeDocument) -> int:
    """Compute how complete a resume is, as an integer percentage.

    Args:
        document (ResumeDocument): The resume to score.

    Returns:
        int: `round(passed / 5 * 100)` where `passed` counts the checks below.

    Notes:
        1. Name and email are both non-empty.
        2. At least one education entry.
        3. At least one experience entry.
        4. At least one project entry.
        5. At least one technical or language skill.
        6. The score is derived on demand and stored nowhere.

    """
    personal = document.personal_details
    checks = (
        bool(personal.full_name and personal.email),
        len(document.education) > 0,
        len(document.experience) > 0,
        len(document.projects) > 0,
        bool(document.skills.technical or document.skills.languages),
    )
    passed = sum(checks)
    return round(passed / COMPLETION_CHECK_COUNT * 100)
