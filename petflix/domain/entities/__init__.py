"""Domain entities exposed by the application."""

from .notification import Notification
from .notification_type import NotificationType
from .push_subscription import PushSubscription
from .queued_notification import QueuedNotification
from .user import User

__all__ = [
    "Notification",
    "NotificationType",
    "PushSubscription",
    "QueuedNotification",
    "User",
]
