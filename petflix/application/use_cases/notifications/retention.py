"""Purge queue rows that were sent long enough ago."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petflix.infrastructure.repositories import NotificationQueueRepository
from petflix.infrastructure.scheduling import PeriodicJob
from petflix.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def purge_sent_notifications(session: Session, *, older_than: datetime) -> int:
    """Delete sent queue rows whose ``sent_at`` precedes ``older_than``.

    Pending rows are never touched.
    """

    deleted = NotificationQueueRepository(session).purge_sent_before(older_than)
    if deleted:
        logger.info("Purged %s sent notification(s) older than %s", deleted, older_than.isoformat())
    return deleted


class NotificationRetentionJob:
    """Periodically run :func:`purge_sent_notifications`."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        retention: timedelta = timedelta(days=7),
        interval: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self.retention = retention
        self._clock = clock
        self._job = PeriodicJob("notification-retention", self.run_once, interval.total_seconds())

    @property
    def running(self) -> bool:
        return self._job.running

    def start(self) -> None:
        self._job.start()

    def stop(self, timeout: float | None = None) -> None:
        self._job.stop(timeout)

    def run_once(self) -> int:
        session = self._session_factory()
        try:
            return purge_sent_notifications(session, older_than=self._clock() - self.retention)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Notification retention purge failed")
            return 0
        finally:
            session.close()


__all__ = ["NotificationRetentionJob", "purge_sent_notifications"]
