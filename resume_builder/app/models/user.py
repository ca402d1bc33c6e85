import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship, validates

from resume_builder.app.models import Base

log = logging.getLogger(__name__)


@dataclass
class UserData:
    """Dataclass to hold data for User initialization."""

    email: str
    hashed_password: str
    full_name: str = ""
    is_active: bool = True
    is_verified: bool = False
    id_: int | None = None


class User(Base):
    """
    User account owning resumes.

    Attributes:
        id (int): Unique identifier for the user.
        email (str): Unique email address used to sign in.
        hashed_password (str): bcrypt hash of the user's password.
        full_name (str): Display name captured at sign-up.
        is_active (bool): Whether the account may sign in.
        is_verified (bool): Whether the email address was confirmed with a one-time code.
        created_at (datetime): Timestamp when the account was created.
        resumes (list[StoredResume]): Resumes owned by the user.
        one_time_codes (list[OneTimeCode]): Verification codes issued to the user.

    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String(100), nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    resumes = relationship(
        "StoredResume",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    one_time_codes = relationship(
        "OneTimeCode",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __init__(self, data: UserData):
        """
        Initialize a User instance.

        Args:
            data (UserData): The values for the new user.

        Returns:
            None

        Notes:
            1. Assign all values to instance attributes; the `validates` hooks check them.
            2. Log the initialization of the user with their email.
            3. This operation does not involve network, disk, or database access.

        """
        _msg = f"Initializing User with email: {data.email}"
        log.debug(_msg)

        if data.id_ is not None:
            self.id = data.id_
        self.email = data.email
        self.hashed_password = data.hashed_password
        self.full_name = data.full_name
        self.is_active = data.is_active
        self.is_verified = data.is_verified

    @validates("email")
    def validate_email(self, key, email):
        """
        Validate the email field.

        Args:
            key (str): The field name being validated (should be 'email').
            email (str): The email value to validate. Must be a non-empty string.

        Returns:
            str: The validated email, stripped and lower-cased.

        """
        if not isinstance(email, str):
            raise ValueError("Email must be a string")
        if not email.strip():
            raise ValueError("Email cannot be empty")
        return email.strip().lower()

    @validates("hashed_password")
    def validate_hashed_password(self, key, hashed_password):
        """Validate that the hashed password is a non-empty string."""
        if not isinstance(hashed_password, str):
            raise ValueError("Hashed password must be a string")
        if not hashed_password.strip():
            raise ValueError("Hashed password cannot be empty")
        return hashed_password.strip()

    @validates("is_active", "is_verified")
    def validate_flags(self, key, value):
        """Validate that boolean account flags are booleans."""
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be a boolean")
        return value
