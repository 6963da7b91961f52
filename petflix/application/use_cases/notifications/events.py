"""Helpers route handlers call after a notifiable action has been committed.

Notifications are best effort: every helper logs and swallows failures so the
follow, comment, like or share that triggered it still succeeds.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petflix.domain.entities import NotificationType, QueuedNotification

from .queue import enqueue_notification

logger = logging.getLogger(__name__)

COMMENT_PREVIEW_LENGTH = 100


def _truncate(text: str, limit: int = COMMENT_PREVIEW_LENGTH) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _enqueue_safely(
    session: Session,
    *,
    user_id: str,
    notification_type: NotificationType,
    payload: dict[str, Any],
) -> QueuedNotification | None:
    if not user_id:
        return None
    try:
        return enqueue_notification(
            session,
            user_id=user_id,
            notification_type=notification_type,
            payload=payload,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception(
            "Failed to queue %s notification for user %s", notification_type.value, user_id
        )
    except ValueError:
        logger.exception(
            "Rejected %s notification for user %s", notification_type.value, user_id
        )
    return None


def notify_new_follower(
    session: Session, *, user_id: str, follower_id: str, follower_name: str
) -> QueuedNotification | None:
    """Queue a follow notification for the user who gained ``follower_id``."""

    return _enqueue_safely(
        session,
        user_id=user_id,
        notification_type=NotificationType.FOLLOW,
        payload={"actor_id": follower_id, "actor_name": follower_name},
    )


def notify_new_comment(
    session: Session,
    *,
    user_id: str,
    commenter_id: str,
    commenter_name: str,
    video_id: str,
    comment_id: str | None = None,
    comment_text: str = "",
) -> QueuedNotification | None:
    """Queue a comment notification for the owner of ``video_id``."""

    if user_id == commenter_id:
        return None
    payload: dict[str, Any] = {
        "actor_id": commenter_id,
        "actor_name": commenter_name,
        "video_id": video_id,
        "comment_text": _truncate(comment_text),
    }
    if comment_id is not None:
        payload["comment_id"] = comment_id
    return _enqueue_safely(
        session, user_id=user_id, notification_type=NotificationType.COMMENT, payload=payload
    )


def notify_video_like(
    session: Session,
    *,
    user_id: str,
    liker_id: str,
    liker_name: str,
    video_id: str,
    video_title: str = "",
) -> QueuedNotification | None:
    """Queue a like notification for the owner of ``video_id``."""

    if user_id == liker_id:
        return None
    return _enqueue_safely(
        session,
        user_id=user_id,
        notification_type=NotificationType.LIKE,
        payload={
            "actor_id": liker_id,
            "actor_name": liker_name,
            "video_id": video_id,
            "video_title": video_title,
        },
    )


def notify_new_video(
    session: Session,
    *,
    follower_ids: list[str],
    uploader_id: str,
    uploader_name: str,
    video_id: str,
    video_title: str = "",
) -> list[QueuedNotification]:
    """Queue a new-video notification for every follower of the uploader."""

    payload = {
        "actor_id": uploader_id,
        "actor_name": uploader_name,
        "video_id": video_id,
        "video_title": video_title,
    }
    queued: list[QueuedNotification] = []
    for follower_id in dict.fromkeys(follower_ids):
        if follower_id == uploader_id:
            continue
        saved = _enqueue_safely(
            session,
            user_id=follower_id,
            notification_type=NotificationType.NEW_VIDEO,
            payload=dict(payload),
        )
        if saved is not None:
            queued.append(saved)
    return queued


__all__ = [
    "COMMENT_PREVIEW_LENGTH",
    "notify_new_comment",
    "notify_new_follower",
    "notify_new_video",
    "notify_video_like",
]
