"""SQLAlchemy model for queued notification events."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
)

from petflix.domain.entities import NotificationType
from petflix.infrastructure.database import Base
from petflix.utils import now_in_app_naive_datetime

_ALLOWED_TYPES = ", ".join(f"'{member.value}'" for member in NotificationType)


class NotificationQueueModel(Base):
    """Raw notification events buffered until the processor groups them."""

    __tablename__ = "notification_queue"
    __table_args__ = (
        Index("idx_notification_queue_unsent", "user_id", "sent_at"),
        CheckConstraint(
            f"notification_type IN ({_ALLOWED_TYPES})",
            name="ck_notification_queue_type",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notification_type = Column(String(50), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    sent_at = Column(DateTime(), nullable=True, index=True)


__all__ = ["NotificationQueueModel"]
