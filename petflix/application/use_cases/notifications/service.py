"""Build the notification background jobs from application settings."""

from __future__ import annotations

from datetime import timedelta
from typing import Callable

from sqlalchemy.orm import Session

from petflix.config import Settings
from petflix.infrastructure.push import PushTransport, build_push_transport

from .delivery import NotificationDispatcher
from .processor import NotificationProcessor
from .retention import NotificationRetentionJob


def build_notification_processor(
    settings: Settings,
    session_factory: Callable[[], Session],
    *,
    transport: PushTransport | None = None,
) -> NotificationProcessor:
    """Return a processor configured from ``settings`` (not started)."""

    dispatcher = NotificationDispatcher(
        transport if transport is not None else build_push_transport(settings),
        timeout=settings.notification_dispatch_timeout_seconds,
        max_workers=settings.notification_dispatch_workers,
    )
    return NotificationProcessor(
        session_factory,
        dispatcher,
        grouping_window=timedelta(seconds=settings.notification_grouping_window_seconds),
        processing_interval=timedelta(seconds=settings.notification_processing_interval_seconds),
    )


def build_retention_job(
    settings: Settings, session_factory: Callable[[], Session]
) -> NotificationRetentionJob:
    return NotificationRetentionJob(
        session_factory,
        retention=timedelta(days=settings.notification_retention_days),
        interval=timedelta(seconds=settings.notification_retention_interval_seconds),
    )
