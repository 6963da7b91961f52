"""Domain entity representing a notification shown in the in-app bell."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    """Message recorded for a user once a digest was dispatched."""

    id: int | None
    user_id: str
    event_type: str
    title: str
    message: str
    link: str = "/"
    created_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


__all__ = ["Notification"]
