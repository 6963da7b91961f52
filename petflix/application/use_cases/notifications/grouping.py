"""Rules that collapse queued events into one digest per user and type."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from petflix.domain.entities import NotificationType, QueuedNotification

FEED_LINK = "/feed"

REQUIRED_PAYLOAD_FIELDS: dict[NotificationType, tuple[str, ...]] = {
    NotificationType.FOLLOW: ("actor_name", "actor_id"),
    NotificationType.COMMENT: ("actor_name", "video_id"),
    NotificationType.LIKE: ("actor_name", "video_id"),
    NotificationType.NEW_VIDEO: ("actor_name", "actor_id", "video_id"),
}

_TITLES: dict[NotificationType, tuple[str, str]] = {
    NotificationType.FOLLOW: ("New Follower!", "{count} New Followers!"),
    NotificationType.COMMENT: ("New Comment", "{count} New Comments"),
    NotificationType.LIKE: ("Video Liked!", "{count} Video Likes!"),
    NotificationType.NEW_VIDEO: ("New Video", "{count} New Videos"),
}


class MalformedPayloadError(ValueError):
    """Raised when a payload lacks the fields its notification type needs."""

    def __init__(self, notification_type: NotificationType, missing: Sequence[str]) -> None:
        self.notification_type = notification_type
        self.missing = tuple(missing)
        super().__init__(
            f"{notification_type.value} payload is missing: {', '.join(self.missing)}"
        )


@dataclass(frozen=True)
class NotificationDigest:
    """A single notification summarizing one partition of queued events."""

    user_id: str
    notification_type: NotificationType
    title: str
    body: str
    link: str
    notification_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.notification_ids)


PartitionKey = tuple[str, NotificationType]


def partition_notifications(
    notifications: Iterable[QueuedNotification],
) -> dict[PartitionKey, list[QueuedNotification]]:
    """Group ``notifications`` by recipient and type, preserving order."""

    partitions: dict[PartitionKey, list[QueuedNotification]] = defaultdict(list)
    for notification in notifications:
        key = (notification.user_id, NotificationType.parse(notification.notification_type))
        partitions[key].append(notification)
    return dict(partitions)


def validate_payload(notification_type: NotificationType, payload: Any) -> Mapping[str, Any]:
    """Return ``payload`` when it carries every field ``notification_type`` needs."""

    required = REQUIRED_PAYLOAD_FIELDS[notification_type]
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(notification_type, required)
    missing = [name for name in required if payload.get(name) in (None, "")]
    if missing:
        raise MalformedPayloadError(notification_type, missing)
    return payload


def format_title(notification_type: NotificationType, count: int) -> str:
    singular, plural = _TITLES[notification_type]
    return singular if count == 1 else plural.format(count=count)


def format_deep_link(notification_type: NotificationType | str, payload: Mapping[str, Any]) -> str:
    """Return the app path a click on a single ``notification_type`` event opens."""

    notification_type = NotificationType.parse(notification_type)
    validate_payload(notification_type, payload)
    if notification_type is NotificationType.FOLLOW:
        return f"/profile/{payload['actor_id']}"
    return f"/video/{payload['video_id']}"


def _format_single(notification_type: NotificationType, payload: Mapping[str, Any]) -> str:
    actor = payload["actor_name"]
    if notification_type is NotificationType.FOLLOW:
        return f"{actor} started following you"
    if notification_type is NotificationType.COMMENT:
        return f"New comment from {actor}"
    if notification_type is NotificationType.LIKE:
        return f"{actor} liked your video"
    return f"New video from {actor}"


def _format_group(
    notification_type: NotificationType, payloads: Sequence[Mapping[str, Any]]
) -> tuple[str, str]:
    count = len(payloads)
    first = payloads[0]

    if notification_type is NotificationType.FOLLOW:
        return f"{count} new followers", FEED_LINK

    if notification_type is NotificationType.NEW_VIDEO:
        actors = {str(payload["actor_id"]) for payload in payloads}
        if len(actors) == 1:
            return (
                f"{count} new videos from {first['actor_name']}",
                f"/profile/{first['actor_id']}",
            )
        return f"{count} new videos from {len(actors)} users", FEED_LINK

    videos = {str(payload["video_id"]) for payload in payloads}
    same_video_link = f"/video/{first['video_id']}"
    if notification_type is NotificationType.COMMENT:
        if len(videos) == 1:
            return f"{count} new comments on your video", same_video_link
        return f"{count} new comments on {len(videos)} videos", FEED_LINK

    if len(videos) == 1:
        return f"{count} people liked your video", same_video_link
    return f"{count} likes on {len(videos)} videos", FEED_LINK


def build_digest(
    user_id: str,
    notification_type: NotificationType,
    notifications: Sequence[QueuedNotification],
) -> NotificationDigest:
    """Summarize ``notifications`` (all valid, same user and type) as one digest.

    A single event keeps its individual phrasing; several events are collapsed
    with the type-specific grouped phrasing.
    """

    if not notifications:
        raise ValueError("Cannot build a digest without notifications")

    payloads = [validate_payload(notification_type, item.payload) for item in notifications]
    if len(payloads) == 1:
        body = _format_single(notification_type, payloads[0])
        link = format_deep_link(notification_type, payloads[0])
    else:
        body, link = _format_group(notification_type, payloads)

    return NotificationDigest(
        user_id=user_id,
        notification_type=notification_type,
        title=format_title(notification_type, len(payloads)),
        body=body,
        link=link,
        notification_ids=tuple(item.id for item in notifications if item.id is not None),
    )


__all__ = [
    "FEED_LINK",
    "MalformedPayloadError",
    "NotificationDigest",
    "REQUIRED_PAYLOAD_FIELDS",
    "build_digest",
    "format_deep_link",
    "format_title",
    "partition_notifications",
    "validate_payload",
]
