"""Web Push delivery through ``pywebpush`` signed with VAPID credentials."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests
from pywebpush import WebPushException, webpush

from petflix.config import Settings
from petflix.domain.entities import PushSubscription

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/pwa-icon-192.png"
_GONE_STATUS_CODES = frozenset({404, 410})


class PushDeliveryError(Exception):
    """Raised when the push service did not accept a notification."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubscriptionExpiredError(PushDeliveryError):
    """Raised when the push service reports the subscription no longer exists."""


@dataclass(frozen=True)
class PushMessage:
    """Content of one push notification as shown by the service worker."""

    title: str
    body: str
    url: str = "/"
    tag: str = "petflix-notification"
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_ICON

    def to_json(self) -> str:
        return json.dumps(
            {
                "title": self.title,
                "body": self.body,
                "icon": self.icon,
                "badge": self.badge,
                "tag": self.tag,
                "data": {"url": self.url},
            }
        )


class PushTransport(Protocol):
    """Anything able to deliver a :class:`PushMessage` to one subscription."""

    def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        ...


def _extract_push_error_details(response: Any) -> str | None:
    """Return a readable description for an error response from the push service."""

    if response is None:
        return None
    text = getattr(response, "text", None)
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except (TypeError, json.JSONDecodeError):
        return str(text).strip() or None
    if isinstance(parsed, dict):
        message = parsed.get("message") or parsed.get("reason") or parsed.get("error")
        if message:
            return str(message)
    return json.dumps(parsed)


class WebPushTransport:
    """Deliver notifications with the Web Push protocol."""

    def __init__(
        self,
        *,
        vapid_private_key: str,
        vapid_subject: str,
        timeout: float,
        ttl: int = 24 * 60 * 60,
    ) -> None:
        self._vapid_private_key = vapid_private_key
        self._vapid_subject = vapid_subject
        self._timeout = timeout
        self._ttl = ttl

    def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        """Send ``message`` to ``subscription`` or raise :class:`PushDeliveryError`."""

        try:
            webpush(
                subscription_info=subscription.to_subscription_info(),
                data=message.to_json(),
                vapid_private_key=self._vapid_private_key,
                # webpush adds ``aud``/``exp`` to the claims it receives
                vapid_claims={"sub": self._vapid_subject},
                timeout=self._timeout,
                ttl=self._ttl,
            )
        except WebPushException as exc:
            response = getattr(exc, "response", None)
            status_code = getattr(response, "status_code", None)
            details = _extract_push_error_details(response)
            if status_code in _GONE_STATUS_CODES:
                raise SubscriptionExpiredError(
                    f"Push subscription {subscription.id} is gone", status_code=status_code
                ) from exc
            if status_code and details:
                msg = f"Push service responded with status {status_code}: {details}"
            elif status_code:
                msg = f"Push service responded with status {status_code}"
            else:
                msg = f"Push delivery failed: {exc}"
            raise PushDeliveryError(msg, status_code=status_code) from exc
        except requests.RequestException as exc:
            raise PushDeliveryError(f"Push service unreachable: {exc}") from exc


def build_push_transport(settings: Settings) -> WebPushTransport | None:
    """Return the configured transport, or ``None`` when VAPID keys are missing."""

    if not settings.push_enabled:
        logger.warning("VAPID keys not configured; push notifications are disabled")
        return None
    return WebPushTransport(
        vapid_private_key=settings.vapid_private_key or "",
        vapid_subject=settings.vapid_subject,
        timeout=settings.notification_dispatch_timeout_seconds,
    )


__all__ = [
    "DEFAULT_ICON",
    "PushDeliveryError",
    "PushMessage",
    "PushTransport",
    "SubscriptionExpiredError",
    "WebPushTransport",
    "build_push_transport",
]
