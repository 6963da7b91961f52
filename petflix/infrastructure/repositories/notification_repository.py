"""Persistence helpers for in-app notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from petflix.domain.entities import Notification
from petflix.infrastructure.models import NotificationModel
from petflix.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(self, user_id: str, *, limit: int | None = 50) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, user_id: str) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.read_at.is_(None))
            .scalar()
            or 0
        )

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel(
            user_id=notification.user_id,
            event_type=notification.event_type,
            title=notification.title,
            message=notification.message,
            link=notification.link or "/",
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
            read_at=ensure_app_naive_datetime(notification.read_at),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def exists_since(
        self, user_id: str, *, event_type: str, link: str, since: datetime
    ) -> bool:
        """Return ``True`` when ``user_id`` got an ``event_type`` notification for ``link``."""

        query = (
            self.session.query(NotificationModel.id)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.event_type == event_type)
            .filter(NotificationModel.link == link)
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
        )
        return query.first() is not None

    def mark_as_read(self, notification_id: int, *, user_id: str) -> bool:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .update(
                {NotificationModel.read_at: ensure_app_naive_datetime(now_in_app_timezone())},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated > 0

    def mark_all_as_read(self, user_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read_at.is_(None),
            )
            .update(
                {NotificationModel.read_at: ensure_app_naive_datetime(now_in_app_timezone())},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def delete(self, notification_id: int, *, user_id: str) -> bool:
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted > 0

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            event_type=model.event_type,
            title=model.title,
            message=model.message,
            link=model.link or "/",
            created_at=ensure_app_timezone(model.created_at),
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["NotificationRepository"]
