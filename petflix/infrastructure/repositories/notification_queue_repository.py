"""Persistence helpers for queued notification events."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy.orm import Session

from petflix.domain.entities import NotificationType, QueuedNotification
from petflix.infrastructure.models import NotificationQueueModel
from petflix.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationQueueRepository:
    """Read and write rows of the ``notification_queue`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, notification: QueuedNotification) -> QueuedNotification:
        model = NotificationQueueModel(
            user_id=notification.user_id,
            notification_type=NotificationType.parse(notification.notification_type).value,
            payload=dict(notification.payload or {}),
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
            sent_at=ensure_app_naive_datetime(notification.sent_at),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> QueuedNotification | None:
        model = self.session.get(NotificationQueueModel, notification_id)
        return self._to_entity(model) if model else None

    def list_ready(self, cutoff: datetime) -> Sequence[QueuedNotification]:
        """Return pending rows created at or before ``cutoff``, oldest first."""

        query = (
            self.session.query(NotificationQueueModel)
            .filter(NotificationQueueModel.sent_at.is_(None))
            .filter(NotificationQueueModel.created_at <= ensure_app_naive_datetime(cutoff))
            .order_by(NotificationQueueModel.created_at.asc(), NotificationQueueModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_pending_for_user(
        self, user_id: str, notification_type: NotificationType
    ) -> Sequence[QueuedNotification]:
        query = (
            self.session.query(NotificationQueueModel)
            .filter(NotificationQueueModel.user_id == user_id)
            .filter(NotificationQueueModel.notification_type == notification_type.value)
            .filter(NotificationQueueModel.sent_at.is_(None))
            .order_by(NotificationQueueModel.created_at.asc(), NotificationQueueModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def has_pending_with_payload_value(
        self,
        user_id: str,
        notification_type: NotificationType,
        *,
        key: str,
        value: Any,
    ) -> bool:
        """Return ``True`` when a pending row carries ``payload[key] == value``."""

        for notification in self.list_pending_for_user(user_id, notification_type):
            if str(notification.payload.get(key)) == str(value):
                return True
        return False

    def mark_sent(self, notification_ids: Iterable[int], *, sent_at: datetime | None = None) -> int:
        """Set ``sent_at`` on the still pending rows among ``notification_ids``."""

        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationQueueModel)
            .filter(
                NotificationQueueModel.id.in_(ids),
                NotificationQueueModel.sent_at.is_(None),
            )
            .update(
                {
                    NotificationQueueModel.sent_at: ensure_app_naive_datetime(
                        sent_at or now_in_app_timezone()
                    )
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def purge_sent_before(self, cutoff: datetime) -> int:
        """Delete sent rows whose ``sent_at`` is older than ``cutoff``."""

        deleted = (
            self.session.query(NotificationQueueModel)
            .filter(NotificationQueueModel.sent_at.is_not(None))
            .filter(NotificationQueueModel.sent_at < ensure_app_naive_datetime(cutoff))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _to_entity(model: NotificationQueueModel) -> QueuedNotification:
        notification_type: NotificationType | str
        try:
            notification_type = NotificationType(model.notification_type)
        except ValueError:
            # rows written before the column was constrained
            notification_type = model.notification_type
        return QueuedNotification(
            id=model.id,
            user_id=model.user_id,
            notification_type=notification_type,
            payload=model.payload if isinstance(model.payload, dict) else {},
            created_at=ensure_app_timezone(model.created_at),
            sent_at=ensure_app_timezone(model.sent_at),
        )


__all__ = ["NotificationQueueRepository"]
