"""Pydantic models describing in-app notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    user_id: str
    event_type: str
    title: str
    message: str
    link: str
    read: bool
    created_at: datetime
    read_at: datetime | None = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = 0


class MessageResponse(BaseModel):
    message: str


__all__ = ["MessageResponse", "NotificationListResponse", "NotificationRead"]
