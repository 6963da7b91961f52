"""Use case for placing notification events in the grouping queue."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping

from sqlalchemy.orm import Session

from petflix.domain.entities import NotificationType, QueuedNotification
from petflix.infrastructure.repositories import (
    NotificationQueueRepository,
    NotificationRepository,
)
from petflix.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

RECENT_LIKE_WINDOW = timedelta(minutes=5)


def _is_duplicate(
    session: Session,
    user_id: str,
    notification_type: NotificationType,
    payload: Mapping[str, Any],
) -> bool:
    queue = NotificationQueueRepository(session)

    if notification_type is NotificationType.LIKE and payload.get("video_id"):
        video_id = payload["video_id"]
        # liking, unliking and liking again must not notify twice
        if queue.has_pending_with_payload_value(
            user_id, notification_type, key="video_id", value=video_id
        ):
            return True
        return NotificationRepository(session).exists_since(
            user_id,
            event_type=notification_type.value,
            link=f"/video/{video_id}",
            since=now_in_app_timezone() - RECENT_LIKE_WINDOW,
        )

    if notification_type is NotificationType.COMMENT and payload.get("comment_id"):
        return queue.has_pending_with_payload_value(
            user_id, notification_type, key="comment_id", value=payload["comment_id"]
        )

    return False


def enqueue_notification(
    session: Session,
    *,
    user_id: str,
    notification_type: NotificationType | str,
    payload: Mapping[str, Any] | None = None,
) -> QueuedNotification | None:
    """Store a pending notification event for ``user_id``.

    Returns the stored row, or ``None`` when an equivalent event is already
    waiting. Raises ``ValueError`` for an unknown type; storage failures (such
    as a recipient that does not exist) propagate as ``SQLAlchemyError``.
    """

    parsed_type = NotificationType.parse(notification_type)
    data = dict(payload or {})

    if _is_duplicate(session, user_id, parsed_type, data):
        logger.info(
            "Skipping duplicate %s notification for user %s", parsed_type.value, user_id
        )
        return None

    queued = NotificationQueueRepository(session).add(
        QueuedNotification(
            id=None,
            user_id=user_id,
            notification_type=parsed_type,
            payload=data,
            created_at=now_in_app_timezone(),
            sent_at=None,
        )
    )
    logger.debug(
        "Queued %s notification %s for user %s", parsed_type.value, queued.id, user_id
    )
    return queued


__all__ = ["RECENT_LIKE_WINDOW", "enqueue_notification"]
