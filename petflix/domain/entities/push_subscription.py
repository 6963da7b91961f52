"""Domain entity describing a browser Web Push subscription."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PushSubscription:
    """Endpoint and keys a browser handed out when the user enabled push."""

    id: int | None
    user_id: str
    endpoint: str
    p256dh: str
    auth: str
    created_at: datetime | None = None

    def to_subscription_info(self) -> dict[str, object]:
        """Return the structure expected by the Web Push protocol helpers."""

        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }


__all__ = ["PushSubscription"]
