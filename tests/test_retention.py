"""Tests for purging old sent queue rows."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from petflix.application.use_cases.notifications import (
    NotificationRetentionJob,
    purge_sent_notifications,
)
from petflix.infrastructure.repositories import NotificationQueueRepository
from petflix.utils import now_in_app_timezone


def test_purge_removes_only_old_sent_rows(session, make_user, queue_event, fetch_queued) -> None:
    user = make_user("owner")
    payload = {"actor_name": "Rex", "actor_id": "a1"}
    old_sent = queue_event(user, "follow", payload, age=timedelta(days=10))
    recent_sent = queue_event(user, "follow", payload, age=timedelta(days=10))
    pending = queue_event(user, "follow", payload, age=timedelta(days=10))
    repository = NotificationQueueRepository(session)
    now = now_in_app_timezone()
    repository.mark_sent([old_sent.id], sent_at=now - timedelta(days=8))
    repository.mark_sent([recent_sent.id], sent_at=now - timedelta(days=1))

    deleted = purge_sent_notifications(session, older_than=now - timedelta(days=7))

    assert deleted == 1
    assert fetch_queued(old_sent.id) is None
    assert fetch_queued(recent_sent.id) is not None
    assert fetch_queued(pending.id).is_pending


def test_retention_job_uses_its_clock(session, session_factory, make_user, queue_event, fetch_queued) -> None:
    user = make_user("owner")
    row = queue_event(user, "follow", {"actor_name": "Rex", "actor_id": "a1"})
    sent_at = now_in_app_timezone()
    NotificationQueueRepository(session).mark_sent([row.id], sent_at=sent_at)
    job = NotificationRetentionJob(
        session_factory,
        retention=timedelta(days=7),
        clock=lambda: sent_at + timedelta(days=7, seconds=1),
    )

    assert job.run_once() == 1
    assert fetch_queued(row.id) is None


def test_retention_job_survives_storage_errors(caplog) -> None:
    engine = create_engine("sqlite://")
    job = NotificationRetentionJob(sessionmaker(bind=engine))

    with caplog.at_level("ERROR"):
        assert job.run_once() == 0

    assert "Notification retention purge failed" in caplog.text
    engine.dispose()
