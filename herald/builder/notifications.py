from dataclasses import dataclass
from typing import List, Optional

from herald.shared.logging import get_logger

logger = get_logger("builder.notifications")


@dataclass
class Notification:
    title: str
    status: str  # success | error | warning | info
    description: Optional[str] = None


class NotificationCenter:
    """Collects user-facing notices (the toast surface of the builder)."""

    def __init__(self):
        self.items: List[Notification] = []

    def notify(self, title: str, status: str = "info", description: Optional[str] = None) -> Notification:
        n = Notification(title=title, status=status, description=description)
        self.items.append(n)
        logger.debug(f"notify [{status}] {title}")
        return n

    @property
    def latest(self) -> Optional[Notification]:
        return self.items[-1] if self.items else None

    def clear(self) -> None:
        self.items.clear()
