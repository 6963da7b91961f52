"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Attributes of a Petflix user that notification delivery relies on."""

    id: str | None
    username: str
    email: str
    notifications_enabled: bool = True
    created_at: datetime | None = None
