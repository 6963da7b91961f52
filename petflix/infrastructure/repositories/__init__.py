"""Repository implementations for infrastructure layer."""

from .notification_queue_repository import NotificationQueueRepository
from .notification_repository import NotificationRepository
from .push_subscription_repository import PushSubscriptionRepository
from .user_repository import UserRepository

__all__ = [
    "NotificationQueueRepository",
    "NotificationRepository",
    "PushSubscriptionRepository",
    "UserRepository",
]
