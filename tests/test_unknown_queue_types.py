"""Queue rows written with a type the processor does not know.

The ``notification_queue`` table here is created without the type check, as
databases set up by earlier releases were.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import create_engine, insert, text

from petflix.domain.entities import NotificationType
from petflix.infrastructure.database import initialize_database
from petflix.infrastructure.models import NotificationQueueModel
from petflix.infrastructure.repositories import NotificationQueueRepository
from petflix.utils import ensure_app_naive_datetime, now_in_app_timezone

UNCHECKED_QUEUE_TABLE = """
CREATE TABLE notification_queue (
    id INTEGER NOT NULL PRIMARY KEY,
    user_id VARCHAR(36) NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    notification_type VARCHAR(50) NOT NULL,
    payload JSON NOT NULL,
    created_at DATETIME NOT NULL,
    sent_at DATETIME
)
"""


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'unchecked.db'}",
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as connection:
        connection.execute(text(UNCHECKED_QUEUE_TABLE))
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def queue_raw(session):
    def _queue(user, notification_type: str, payload: dict) -> int:
        result = session.execute(
            insert(NotificationQueueModel).values(
                user_id=user.id,
                notification_type=notification_type,
                payload=payload,
                created_at=ensure_app_naive_datetime(
                    now_in_app_timezone() - timedelta(minutes=10)
                ),
            )
        )
        session.commit()
        return result.inserted_primary_key[0]

    return _queue


def test_unknown_type_is_kept_as_raw_string(session, make_user, queue_raw) -> None:
    user = make_user("legacy")
    row_id = queue_raw(user, "video_like", {"actor_name": "Rex", "video_id": "v1"})

    row = NotificationQueueRepository(session).get(row_id)

    assert row.notification_type == "video_like"
    assert not isinstance(row.notification_type, NotificationType)


def test_unknown_type_does_not_block_other_users(
    make_user, subscribe_user, queue_event, queue_raw, fetch_queued, transport, make_processor, caplog
) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    subscribe_user(alice)
    subscribe_user(bob)
    good = queue_event(alice, "follow", {"actor_name": "Rex", "actor_id": "a1"})
    unknown_id = queue_raw(bob, "video_like", {"actor_name": "Rex", "video_id": "v1"})
    processor = make_processor()

    with caplog.at_level("WARNING"):
        first = processor.process_tick()
    second = processor.process_tick()

    assert not first.aborted
    assert first.malformed == 1
    assert first.rows_by_type["video_like"] == 1
    assert first.outcomes == {"delivered": 1}
    assert first.marked_sent == 2
    assert f"Skipping notification {unknown_id} (user {bob.id}) with unknown type 'video_like'" in caplog.text
    assert [message.body for message in transport.messages_for(alice.id)] == [
        "Rex started following you"
    ]
    assert transport.messages_for(bob.id) == []
    assert fetch_queued(good.id).sent_at is not None
    assert fetch_queued(unknown_id).sent_at is not None
    assert not second.aborted
    assert second.malformed == 0
    assert second.digests == 0
