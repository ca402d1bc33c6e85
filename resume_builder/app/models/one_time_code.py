import logging
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from resume_builder.app.models import Base

log = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from the database."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OneTimeCode(Base):
    """A one-time code sent to confirm ownership of an email address.

    Attributes:
        id (int): Unique identifier for the code.
        user_id (int): The user the code was issued to.
        hashed_code (str): bcrypt hash of the numeric code.
        sent_at (datetime): When the code was dispatched.
        expires_at (datetime): After this instant the code is rejected.
        consumed_at (datetime | None): When the code was used; a consumed code is rejected.

    """

    __tablename__ = "one_time_codes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    hashed_code = Column(String, nullable=False)
    sent_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    expires_at = Column(DateTime, nullable=False)
    consumed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="one_time_codes")

    def is_usable(self, now: datetime) -> bool:
        """Return True if the code is unconsumed and not yet expired at `now`."""
        return self.consumed_at is None and as_utc(self.expires_at) > now
