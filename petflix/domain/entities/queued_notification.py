"""Domain entity representing a raw notification event waiting in the queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .notification_type import NotificationType


@dataclass
class QueuedNotification:
    """One notification-worthy event addressed to a single user.

    ``sent_at`` stays ``None`` while the event is pending; once the processor
    dispatched the digest containing it the row is frozen. A stored type
    outside :class:`NotificationType` is kept as its raw string.
    """

    id: int | None
    user_id: str
    notification_type: NotificationType | str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    sent_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        """Return ``True`` while the event has not been dispatched."""

        return self.sent_at is None


__all__ = ["QueuedNotification"]
