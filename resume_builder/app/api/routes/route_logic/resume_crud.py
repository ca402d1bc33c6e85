import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from resume_builder.app.models.resume_model import (
    StoredResume,
    StoredResumeData,
    empty_skills,
)

log = logging.getLogger(__name__)


class ResumeCreateParams(BaseModel):
    """Parameters for creating a resume."""

    user_id: int
    title: str = "My Resume"
    template_id: str | None = None


class ResumeUpdateParams(BaseModel):
    """Parameters for updating a resume. Fields left as None are not changed."""

    title: str | None = None
    personal_details: dict[str, Any] | None = None
    education: list[dict[str, Any]] | None = None
    experience: list[dict[str, Any]] | None = None
    projects: list[dict[str, Any]] | None = None
    skills: dict[str, list[str]] | None = None
    template_id: str | None = None


def get_resume_by_id_and_user(
    db: Session,
    resume_id: int,
    user_id: int,
) -> StoredResume:
    """Retrieve a resume by its ID and verify it belongs to the specified user.

    Args:
        db (Session): The SQLAlchemy database session used to query the database.
        resume_id (int): The unique identifier for the resume to retrieve.
        user_id (int): The unique identifier for the user who owns the resume.

    Returns:
        StoredResume: The resume row matching the provided ID and user ID.

    Raises:
        HTTPException: If no resume is found with the given ID and user ID, raises a 404 error with detail "Resume not found".

    Notes:
        1. Query the resumes table for a row where the id matches resume_id and the user_id matches user_id.
        2. If no matching row is found, raise an HTTPException with status code 404.
        3. This function performs a single database query.

    """
    resume = (
        db.query(StoredResume)
        .filter(
            StoredResume.id == resume_id,
            StoredResume.user_id == user_id,
        )
        .first()
    )

    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")

    return resume


def get_user_resumes(db: Session, user_id: int) -> list[StoredResume]:
    """Retrieve all resumes owned by a user, most recently updated first.

    Args:
        db (Session): The SQLAlchemy database session.
        user_id (int): The owner of the resumes.

    Returns:
        list[StoredResume]: The user's resumes ordered by `updated_at` descending.

    Notes:
        1. Ties on `updated_at` are broken by the highest id first.
        2. This function performs a single database query.

    """
    return (
        db.query(StoredResume)
        .filter(StoredResume.user_id == user_id)
        .order_by(StoredResume.updated_at.desc(), StoredResume.id.desc())
        .all()
    )


def create_resume(db: Session, params: ResumeCreateParams) -> StoredResume:
    """Create and save a new, empty resume.

    Args:
        db (Session): The database session.
        params (ResumeCreateParams): The owner, title and optional template.

    Returns:
        StoredResume: The newly created resume row.

    Notes:
        1. Sections start empty: no personal details, no entries, four empty skill lists.
        2. Add the row, commit and refresh it so the generated id is available.
        3. This function performs a database write operation.

    """
    _msg = f"Creating resume '{params.title}' for user {params.user_id}"
    log.debug(_msg)
    resume_data = StoredResumeData(
        user_id=params.user_id,
        title=params.title,
        personal_details={},
        education=[],
        experience=[],
        projects=[],
        skills=empty_skills(),
        template_id=params.template_id,
    )
    resume = StoredResume(data=resume_data)
    db.add(resume)
    db.commit()
    db.refresh(resume)
    return resume


def update_resume(
    db: Session,
    resume: StoredResume,
    params: ResumeUpdateParams,
) -> StoredResume:
    """Update the given fields of a resume and stamp its update time.

    Args:
        db (Session): The database session.
        resume (StoredResume): The resume to update.
        params (ResumeUpdateParams): The new values; None leaves a field unchanged.

    Returns:
        StoredResume: The updated resume row.

    Notes:
        1. Copy every provided field onto the row.
        2. Set `updated_at` to the current time even when no field changed.
        3. Commit and refresh the row.
        4. This function performs a database write operation.

    """
    for field_name, value in params.model_dump(exclude_none=True).items():
        setattr(resume, field_name, value)
    resume.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(resume)
    return resume
