"""Endpoints backing the in-app notification bell."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from petflix.domain.entities import Notification, User
from petflix.infrastructure.database import get_db
from petflix.infrastructure.repositories import NotificationRepository
from petflix.interfaces.api.dependencies import get_current_user
from petflix.interfaces.api.schemas import (
    MessageResponse,
    NotificationListResponse,
    NotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.user_id,
        event_type=notification.event_type,
        title=notification.title,
        message=notification.message,
        link=notification.link,
        read=notification.is_read,
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")


@router.get("/", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationListResponse:
    """Return the most recent notifications for the authenticated user."""

    repository = NotificationRepository(db)
    notifications = repository.list_for_user(current_user.id, limit=limit)
    return NotificationListResponse(
        notifications=[_notification_to_schema(item) for item in notifications],
        unread_count=repository.count_unread(current_user.id),
    )


@router.patch("/read-all", response_model=MessageResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    NotificationRepository(db).mark_all_as_read(current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=MessageResponse)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not NotificationRepository(db).mark_as_read(notification_id, user_id=current_user.id):
        raise _not_found()
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not NotificationRepository(db).delete(notification_id, user_id=current_user.id):
        raise _not_found()
    return MessageResponse(message="Notification deleted successfully")
