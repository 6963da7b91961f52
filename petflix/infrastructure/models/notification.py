"""SQLAlchemy model for notifications shown in the in-app bell."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from petflix.infrastructure.database import Base
from petflix.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_read", "user_id", "read_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(500), nullable=False, default="/")
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    read_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
