"""Use cases for registering and removing browser push subscriptions."""

from __future__ import annotations

from urllib.parse import urlparse

from sqlalchemy.orm import Session

from petflix.domain.entities import PushSubscription
from petflix.infrastructure.repositories import PushSubscriptionRepository


def _validate_endpoint(endpoint: str) -> str:
    endpoint = (endpoint or "").strip()
    parsed = urlparse(endpoint)
    if parsed.scheme != "https" or not parsed.netloc:
        raise ValueError("A valid https endpoint URL is required")
    return endpoint


def subscribe(
    session: Session, *, user_id: str, endpoint: str, p256dh: str, auth: str
) -> tuple[PushSubscription, bool]:
    """Register a subscription for ``user_id``.

    Returns the subscription and whether it was created; an endpoint the user
    already registered is returned unchanged.
    """

    endpoint = _validate_endpoint(endpoint)
    if not (p256dh or "").strip():
        raise ValueError("p256dh key is required")
    if not (auth or "").strip():
        raise ValueError("auth key is required")

    repository = PushSubscriptionRepository(session)
    existing = repository.get_by_endpoint(user_id, endpoint)
    if existing is not None:
        return existing, False

    created = repository.create(
        PushSubscription(
            id=None,
            user_id=user_id,
            endpoint=endpoint,
            p256dh=p256dh.strip(),
            auth=auth.strip(),
        )
    )
    return created, True


def unsubscribe(session: Session, *, user_id: str, endpoint: str) -> bool:
    """Remove the subscription of ``user_id`` for ``endpoint``."""

    if not (endpoint or "").strip():
        raise ValueError("Endpoint is required")
    return PushSubscriptionRepository(session).delete_by_endpoint(user_id, endpoint.strip())


def unsubscribe_all(session: Session, *, user_id: str) -> int:
    """Remove every subscription of ``user_id`` and return how many there were."""

    return PushSubscriptionRepository(session).delete_all_for_user(user_id)


__all__ = ["subscribe", "unsubscribe", "unsubscribe_all"]
