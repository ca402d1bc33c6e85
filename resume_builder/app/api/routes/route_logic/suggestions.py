import logging
import random

log = logging.getLogger(__name__)

SUGGESTIONS: tuple[str, ...] = (
    "Start each experience bullet with a strong action verb such as 'Led', 'Built' or 'Reduced'.",
    "Quantify your impact: numbers like 'cut build time by 40%' stand out to recruiters.",
    "Keep your professional summary to two or three sentences focused on the role you want.",
    "List your most recent experience first and keep dates in one consistent format.",
    "Link a portfolio or GitHub profile so reviewers can see your work directly.",
    "Group skills by category and list the ones most relevant to the job first.",
    "Describe projects by the problem, what you built and the result.",
    "Tailor your resume to each posting by mirroring the keywords in the job description.",
    "Remove outdated or unrelated roles to keep the resume to one or two pages.",
    "Proofread for typos, then ask someone else to read it once more.",
)


def pick_suggestion(rng: random.Random | None = None) -> str:
    """Return one resume-writing tip chosen uniformly at random.

    Args:
        rng (random.Random | None): Random source; the module-level generator when None.

    Returns:
        str: A tip from `SUGGESTIONS`.

    """
    chooser = rng or random
    return chooser.choice(SUGGESTIONS)
