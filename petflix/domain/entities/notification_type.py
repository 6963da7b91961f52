"""Closed set of notification kinds the queue accepts."""

from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    """Kinds of social events that produce a notification."""

    FOLLOW = "follow"
    COMMENT = "comment"
    LIKE = "like"
    NEW_VIDEO = "new_video"

    @classmethod
    def parse(cls, value: "NotificationType | str") -> "NotificationType":
        """Return the member for ``value`` or raise ``ValueError``."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown notification type '{value}'. Expected one of: {allowed}"
            ) from None


__all__ = ["NotificationType"]
