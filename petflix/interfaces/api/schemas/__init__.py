from .notification import MessageResponse, NotificationListResponse, NotificationRead
from .push import (
    PublicKeyResponse,
    PushKeys,
    PushSubscribeResponse,
    PushSubscriptionCreate,
    PushSubscriptionRead,
    PushUnsubscribeAllResponse,
    PushUnsubscribeRequest,
)

__all__ = [
    "MessageResponse",
    "NotificationListResponse",
    "NotificationRead",
    "PublicKeyResponse",
    "PushKeys",
    "PushSubscribeResponse",
    "PushSubscriptionCreate",
    "PushSubscriptionRead",
    "PushUnsubscribeAllResponse",
    "PushUnsubscribeRequest",
]
