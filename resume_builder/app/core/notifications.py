import logging
from enum import Enum

from pydantic import BaseModel

log = logging.getLogger(__name__)


class NotificationVariant(str, Enum):
    """Visual treatment of a notification."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """A user-visible toast message.

    Attributes:
        title (str): Short headline.
        description (str): Body text; never contains backend error detail.
        variant (NotificationVariant): Styling hint for the UI.

    """

    title: str
    description: str = ""
    variant: NotificationVariant = NotificationVariant.DEFAULT


class NotificationLog:
    """Collects notifications until the next response drains them."""

    def __init__(self):
        self._items: list[Notification] = []

    def notify(self, title: str, description: str = "") -> None:
        self._items.append(Notification(title=title, description=description))

    def error(self, title: str, description: str = "") -> None:
        _msg = f"Error notification: {title}"
        log.debug(_msg)
        self._items.append(
            Notification(
                title=title,
                description=description,
                variant=NotificationVariant.DESTRUCTIVE,
            ),
        )

    def drain(self) -> list[Notification]:
        """Return all pending notifications and clear the log."""
        items, self._items = self._items, []
        return items

    @property
    def pending(self) -> list[Notification]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
