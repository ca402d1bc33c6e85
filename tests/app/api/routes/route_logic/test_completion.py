from resume_builder.app.api.routes.route_logic.completion import calculate_completion
from resume_builder.app.models.resume import (
    EducationEntry,
    ExperienceEntry,
    PersonalDetails,
    ResumeDocument,
    Skills,
)
from resume_builder.app.models.resume.projects import ProjectEntry


def _full_document() -> ResumeDocument:
    return ResumeDocument(
        personal_details=PersonalDetails(full_name="Jane Doe", email="jane@example.com"),
        education=[EducationEntry(id="1")],
        experience=[ExperienceEntry(id="2")],
        projects=[ProjectEntry(id="3")],
        skills=Skills(languages=["Python"]),
    )


def test_empty_document_scores_zero():
    assert calculate_completion(ResumeDocument()) == 0


def test_full_document_scores_hundred():
    assert calculate_completion(_full_document()) == 100


def test_name_without_email_does_not_count():
    document = ResumeDocument(personal_details=PersonalDetails(full_name="Jane"))
    assert calculate_completion(document) == 0


def test_each_check_adds_twenty():
    document = ResumeDocument(
        personal_details=PersonalDetails(full_name="Jane", email="j@example.com"),
    )
    assert calculate_completion(document) == 20
    document = document.model_copy(update={"education": [EducationEntry(id="1")]})
    assert calculate_completion(document) == 40


def test_only_technical_or_language_skills_count():
    assert calculate_completion(ResumeDocument(skills=Skills(tools=["Git"]))) == 0
    assert calculate_completion(ResumeDocument(skills=Skills(technical=["SQL"]))) == 20


def test_adding_content_never_lowers_the_score():
    document = ResumeDocument()
    scores = [calculate_completion(document)]
    for update in (
        {"projects": [ProjectEntry(id="1")]},
        {"skills": Skills(tools=["Git"])},
        {"experience": [ExperienceEntry(id="2")]},
        {"skills": Skills(tools=["Git"], technical=["SQL"])},
    ):
        document = document.model_copy(update=update)
        scores.append(calculate_completion(document))
    assert scores == sorted(scores)
    assert all(score % 20 == 0 for score in scores)
