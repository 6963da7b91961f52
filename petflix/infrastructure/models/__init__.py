"""ORM models used by the application infrastructure."""

from .user import UserModel
from .notification import NotificationModel
from .notification_queue import NotificationQueueModel
from .push_subscription import PushSubscriptionModel

__all__ = [
    "UserModel",
    "NotificationModel",
    "NotificationQueueModel",
    "PushSubscriptionModel",
]
