"""Persistence layer for browser push subscriptions."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from petflix.domain.entities import PushSubscription
from petflix.infrastructure.models import PushSubscriptionModel
from petflix.utils import ensure_app_timezone


class PushSubscriptionRepository:
    """Look up and maintain the push subscriptions registered per user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        query = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .order_by(PushSubscriptionModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def get_by_endpoint(self, user_id: str, endpoint: str) -> PushSubscription | None:
        model = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .filter(PushSubscriptionModel.endpoint == endpoint)
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, subscription: PushSubscription) -> PushSubscription:
        model = PushSubscriptionModel(
            user_id=subscription.user_id,
            endpoint=subscription.endpoint,
            p256dh=subscription.p256dh,
            auth=subscription.auth,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, subscription_id: int) -> bool:
        deleted = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.id == subscription_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted > 0

    def delete_by_endpoint(self, user_id: str, endpoint: str) -> bool:
        deleted = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .filter(PushSubscriptionModel.endpoint == endpoint)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted > 0

    def delete_all_for_user(self, user_id: str) -> int:
        deleted = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            endpoint=model.endpoint,
            p256dh=model.p256dh,
            auth=model.auth,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["PushSubscriptionRepository"]
