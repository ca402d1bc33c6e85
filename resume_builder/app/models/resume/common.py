import logging
import threading
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)

_id_lock = threading.Lock()
_last_issued_ms = 0


def new_entry_id() -> str:
    """Return a fresh, timestamp-derived entry identifier.

    Identifiers are milliseconds since the epoch. Within a process they are
    strictly increasing, so an identifier is never handed out twice even when
    two entries are created in the same millisecond.

    Returns:
        str: The new identifier.

    """
    global _last_issued_ms
    with _id_lock:
        now_ms = time.time_ns() // 1_000_000
        _last_issued_ms = max(now_ms, _last_issued_ms + 1)
        return str(_last_issued_ms)


class ResumeRecord(BaseModel):
    """Base for resume models: camelCase aliases, frozen, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class TextRecord(ResumeRecord):
    """A record whose fields are all free text.

    Missing or null values read from storage become empty strings, and
    numbers are kept as their text form.
    """

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, v: Any):
        if v is None:
            return ""
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    @classmethod
    def resolve_field(cls, field: str) -> str:
        """Map an attribute name or its camelCase alias to the attribute name.

        Raises:
            ValueError: If the name matches no field.

        """
        for name, info in cls.model_fields.items():
            if field in (name, info.alias):
                return name
        raise ValueError(f"Unknown field '{field}' for {cls.__name__}")


class SectionEntry(TextRecord):
    """An entry in a list section, identified by an opaque `id`."""

    id: str = Field(default="", validate_default=True)

    @field_validator("id", mode="after")
    @classmethod
    def ensure_id(cls, v: str):
        return v or new_entry_id()
