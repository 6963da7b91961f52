"""Deliver notification digests to the recipient's devices."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum

from sqlalchemy.orm import Session

from petflix.domain.entities import Notification, PushSubscription
from petflix.infrastructure.push import (
    PushDeliveryError,
    PushMessage,
    PushTransport,
    SubscriptionExpiredError,
)
from petflix.infrastructure.repositories import (
    NotificationRepository,
    PushSubscriptionRepository,
    UserRepository,
)
from petflix.utils import now_in_app_timezone, to_epoch_milliseconds

from .grouping import NotificationDigest

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    """What happened to one partition during a processing tick."""

    DELIVERED = "delivered"
    NO_SUBSCRIPTION = "no_subscription"
    OPTED_OUT = "opted_out"
    FAILED = "failed"
    MALFORMED = "malformed"


class NotificationDispatcher:
    """Record a digest in the in-app bell and push it to every subscription.

    Each subscription is sent on a worker thread; the whole attempt is bounded
    by ``timeout`` seconds and sends still running afterwards count as failed.
    No attempt is retried. The worker pool is created on first use, so a
    closed dispatcher starts a fresh one on its next dispatch.
    """

    def __init__(
        self,
        transport: PushTransport | None,
        *,
        timeout: float,
        max_workers: int = 4,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def close(self) -> None:
        """Release the worker threads without waiting for hung sends."""

        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="push-dispatch"
                )
            return self._executor

    def dispatch(self, session: Session, digest: NotificationDigest) -> DispatchOutcome:
        user = UserRepository(session).get(digest.user_id)
        if user is None or not user.notifications_enabled:
            logger.info(
                "User %s does not accept notifications; skipping %s digest",
                digest.user_id,
                digest.notification_type.value,
            )
            return DispatchOutcome.OPTED_OUT

        NotificationRepository(session).create(
            Notification(
                id=None,
                user_id=digest.user_id,
                event_type=digest.notification_type.value,
                title=digest.title,
                message=digest.body,
                link=digest.link,
            )
        )

        subscriptions = PushSubscriptionRepository(session).list_for_user(digest.user_id)
        if not subscriptions:
            logger.info("No push subscriptions for user %s", digest.user_id)
            return DispatchOutcome.NO_SUBSCRIPTION
        transport = self._transport
        if transport is None:
            logger.debug("Push transport disabled; not pushing to user %s", digest.user_id)
            return DispatchOutcome.NO_SUBSCRIPTION

        message = PushMessage(
            title=digest.title,
            body=digest.body,
            url=digest.link,
            tag=(
                f"grouped-{digest.notification_type.value}-"
                f"{to_epoch_milliseconds(now_in_app_timezone())}"
            ),
        )
        delivered, expired = self._send_all(transport, digest.user_id, subscriptions, message)

        if expired:
            repository = PushSubscriptionRepository(session)
            for subscription in expired:
                if subscription.id is not None and repository.delete(subscription.id):
                    logger.info(
                        "Removed expired push subscription %s for user %s",
                        subscription.id,
                        digest.user_id,
                    )

        return DispatchOutcome.DELIVERED if delivered else DispatchOutcome.FAILED

    def _send_all(
        self,
        transport: PushTransport,
        user_id: str,
        subscriptions: Sequence[PushSubscription],
        message: PushMessage,
    ) -> tuple[int, list[PushSubscription]]:
        executor = self._get_executor()
        futures: dict[Future[None], PushSubscription] = {
            executor.submit(transport.send, subscription, message): subscription
            for subscription in subscriptions
        }
        done, not_done = wait(futures, timeout=self._timeout)

        for future in not_done:
            future.cancel()
            logger.warning(
                "Push to subscription %s of user %s timed out after %ss",
                futures[future].id,
                user_id,
                self._timeout,
            )

        delivered = 0
        expired: list[PushSubscription] = []
        for future in done:
            subscription = futures[future]
            error = future.exception()
            if error is None:
                delivered += 1
            elif isinstance(error, SubscriptionExpiredError):
                expired.append(subscription)
            elif isinstance(error, PushDeliveryError):
                logger.error(
                    "Push to subscription %s of user %s failed: %s",
                    subscription.id,
                    user_id,
                    error,
                )
            else:
                logger.error(
                    "Unexpected error pushing to subscription %s of user %s",
                    subscription.id,
                    user_id,
                    exc_info=error,
                )
        return delivered, expired


__all__ = ["DispatchOutcome", "NotificationDispatcher"]
