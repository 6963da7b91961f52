"""Periodic processor that drains the notification queue into digests.

Events wait in ``notification_queue`` until they are at least
``grouping_window`` old. Every tick takes the eligible rows, groups them per
recipient and type, dispatches one digest per group and marks the rows as
sent once the attempt was made, whatever its outcome. A crash between the
dispatch and the update can therefore send a digest twice.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petflix.domain.entities import NotificationType, QueuedNotification
from petflix.infrastructure.repositories import NotificationQueueRepository
from petflix.infrastructure.scheduling import PeriodicJob
from petflix.utils import now_in_app_timezone

from .delivery import DispatchOutcome, NotificationDispatcher
from .grouping import (
    MalformedPayloadError,
    build_digest,
    partition_notifications,
    validate_payload,
)

logger = logging.getLogger(__name__)


@dataclass
class TickSummary:
    """Counters describing what a single processing tick did."""

    rows_by_type: Counter[str] = field(default_factory=Counter)
    digests_by_type: Counter[str] = field(default_factory=Counter)
    outcomes: Counter[str] = field(default_factory=Counter)
    malformed: int = 0
    marked_sent: int = 0
    aborted: bool = False
    skipped: bool = False

    @property
    def digests(self) -> int:
        return sum(self.digests_by_type.values())

    def record(self, notification_type: NotificationType, rows: int, outcome: DispatchOutcome) -> None:
        self.rows_by_type[notification_type.value] += rows
        self.outcomes[outcome.value] += 1
        if outcome is not DispatchOutcome.MALFORMED:
            self.digests_by_type[notification_type.value] += 1


class NotificationProcessor:
    """Own the grouping tick and the background thread that repeats it."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: NotificationDispatcher,
        *,
        grouping_window: timedelta = timedelta(minutes=5),
        processing_interval: timedelta = timedelta(minutes=1),
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self.grouping_window = grouping_window
        self.processing_interval = processing_interval
        self._clock = clock
        self._tick_lock = threading.Lock()
        self._job = PeriodicJob(
            "notification-grouping",
            self.process_tick,
            processing_interval.total_seconds(),
        )

    @property
    def running(self) -> bool:
        return self._job.running

    def start(self) -> None:
        """Run a tick now and then every ``processing_interval``."""

        self._job.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the background loop and release the dispatcher threads."""

        self._job.stop(timeout)
        self._dispatcher.close()

    def process_tick(self) -> TickSummary:
        """Dispatch every partition of eligible queued notifications once.

        A tick requested while another one is running is skipped. Storage
        errors abort the tick without raising; its rows stay pending for the
        next one.
        """

        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Notification tick already in progress; skipping this one")
            return TickSummary(skipped=True)
        try:
            summary = self._run_tick()
        finally:
            self._tick_lock.release()
        self._log_summary(summary)
        return summary

    def _run_tick(self) -> TickSummary:
        summary = TickSummary()
        cutoff = self._clock() - self.grouping_window
        session = self._session_factory()
        try:
            repository = NotificationQueueRepository(session)
            pending = repository.list_ready(cutoff)
            if not pending:
                return summary

            pending = self._skip_unknown_types(repository, pending, summary)
            partitions = partition_notifications(pending)
            for (user_id, notification_type), rows in partitions.items():
                outcome = self._process_partition(session, user_id, notification_type, rows, summary)
                summary.marked_sent += repository.mark_sent(
                    [row.id for row in rows if row.id is not None], sent_at=self._clock()
                )
                summary.record(notification_type, len(rows), outcome)
        except SQLAlchemyError:
            session.rollback()
            summary.aborted = True
            logger.exception("Notification tick aborted by a storage error")
        finally:
            session.close()
        return summary

    def _skip_unknown_types(
        self,
        repository: NotificationQueueRepository,
        rows: Sequence[QueuedNotification],
        summary: TickSummary,
    ) -> list[QueuedNotification]:
        """Mark rows with an unrecognised type as sent and return the others."""

        known: list[QueuedNotification] = []
        unknown: list[QueuedNotification] = []
        for row in rows:
            if isinstance(row.notification_type, NotificationType):
                known.append(row)
            else:
                unknown.append(row)

        for row in unknown:
            summary.malformed += 1
            summary.rows_by_type[str(row.notification_type)] += 1
            logger.warning(
                "Skipping notification %s (user %s) with unknown type %r",
                row.id,
                row.user_id,
                row.notification_type,
            )
        if unknown:
            summary.marked_sent += repository.mark_sent(
                [row.id for row in unknown if row.id is not None], sent_at=self._clock()
            )
        return known

    def _process_partition(
        self,
        session: Session,
        user_id: str,
        notification_type: NotificationType,
        rows: Sequence[QueuedNotification],
        summary: TickSummary,
    ) -> DispatchOutcome:
        valid: list[QueuedNotification] = []
        for row in rows:
            try:
                validate_payload(notification_type, row.payload)
            except MalformedPayloadError as exc:
                summary.malformed += 1
                logger.warning(
                    "Skipping malformed notification %s (user %s, type %s): %s",
                    row.id,
                    user_id,
                    notification_type.value,
                    exc,
                )
                continue
            valid.append(row)

        if not valid:
            return DispatchOutcome.MALFORMED

        try:
            digest = build_digest(user_id, notification_type, valid)
            return self._dispatcher.dispatch(session, digest)
        except SQLAlchemyError:
            raise
        except Exception:  # noqa: BLE001 - one bad partition must not stop the tick
            logger.exception(
                "Failed to dispatch %s digest for user %s", notification_type.value, user_id
            )
            return DispatchOutcome.FAILED

    @staticmethod
    def _log_summary(summary: TickSummary) -> None:
        if summary.skipped or not (summary.rows_by_type or summary.aborted):
            return
        logger.info(
            "Notification tick: %s digest(s) from %s row(s) %s; outcomes %s; malformed %s%s",
            summary.digests,
            sum(summary.rows_by_type.values()),
            dict(summary.rows_by_type),
            dict(summary.outcomes),
            summary.malformed,
            " (aborted)" if summary.aborted else "",
        )


__all__ = ["NotificationProcessor", "TickSummary"]
