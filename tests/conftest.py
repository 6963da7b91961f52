"""Shared fixtures for the notification tests."""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("NOTIFICATION_PROCESSOR_ENABLED", "false")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from petflix.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationProcessor,
)
from petflix.domain.entities import (
    NotificationType,
    PushSubscription,
    QueuedNotification,
    User,
)
from petflix.infrastructure.database import initialize_database
from petflix.infrastructure.push import PushMessage
from petflix.infrastructure.repositories import (
    NotificationQueueRepository,
    PushSubscriptionRepository,
    UserRepository,
)
from petflix.utils import now_in_app_timezone


class RecordingTransport:
    """Push transport double that records sends and can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[tuple[PushSubscription, PushMessage]] = []
        self.failures: dict[str, BaseException] = {}
        self.before_send: Callable[[PushSubscription], None] | None = None
        self._lock = threading.Lock()

    def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        if self.before_send is not None:
            self.before_send(subscription)
        error = self.failures.get(subscription.endpoint)
        if error is not None:
            raise error
        with self._lock:
            self.sent.append((subscription, message))

    def messages_for(self, user_id: str) -> list[PushMessage]:
        return [message for subscription, message in self.sent if subscription.user_id == user_id]


_DEFAULT = object()


@pytest.fixture()
def engine(tmp_path: Path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'petflix.db'}",
        connect_args={"check_same_thread": False},
    )
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(session) -> Callable[..., User]:
    def _make(username: str, *, notifications_enabled: bool = True) -> User:
        return UserRepository(session).create(
            User(
                id=None,
                username=username,
                email=f"{username}@example.com",
                notifications_enabled=notifications_enabled,
            )
        )

    return _make


@pytest.fixture()
def subscribe_user(session) -> Callable[..., PushSubscription]:
    def _subscribe(user: User, endpoint: str | None = None) -> PushSubscription:
        return PushSubscriptionRepository(session).create(
            PushSubscription(
                id=None,
                user_id=user.id,
                endpoint=endpoint or f"https://push.example.com/{user.username}",
                p256dh="p256dh-key",
                auth="auth-secret",
            )
        )

    return _subscribe


@pytest.fixture()
def queue_event(session) -> Callable[..., QueuedNotification]:
    def _queue(
        user: User,
        notification_type: str,
        payload: dict[str, Any],
        *,
        age: timedelta = timedelta(minutes=6),
    ) -> QueuedNotification:
        return NotificationQueueRepository(session).add(
            QueuedNotification(
                id=None,
                user_id=user.id,
                notification_type=NotificationType.parse(notification_type),
                payload=payload,
                created_at=now_in_app_timezone() - age,
            )
        )

    return _queue


@pytest.fixture()
def fetch_queued(session_factory) -> Callable[[int], QueuedNotification | None]:
    """Read a queue row through a fresh session so no stale state is returned."""

    def _fetch(notification_id: int) -> QueuedNotification | None:
        with session_factory() as fresh:
            return NotificationQueueRepository(fresh).get(notification_id)

    return _fetch


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def make_processor(session_factory, transport):
    created: list[NotificationProcessor] = []

    def _make(
        *,
        push_transport: Any = _DEFAULT,
        dispatch_timeout: float = 2.0,
        grouping_window: timedelta = timedelta(minutes=5),
        processing_interval: timedelta = timedelta(minutes=1),
        factory: Any = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> NotificationProcessor:
        dispatcher = NotificationDispatcher(
            transport if push_transport is _DEFAULT else push_transport,
            timeout=dispatch_timeout,
        )
        processor = NotificationProcessor(
            factory or session_factory,
            dispatcher,
            grouping_window=grouping_window,
            processing_interval=processing_interval,
            clock=clock,
        )
        created.append(processor)
        return processor

    yield _make
    for processor in created:
        processor.stop(timeout=2)
