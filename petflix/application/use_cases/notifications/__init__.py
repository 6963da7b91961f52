"""Public helpers for queueing, grouping and delivering notifications."""

from .delivery import DispatchOutcome, NotificationDispatcher
from .events import (
    notify_new_comment,
    notify_new_follower,
    notify_new_video,
    notify_video_like,
)
from .grouping import (
    MalformedPayloadError,
    NotificationDigest,
    build_digest,
    format_deep_link,
    partition_notifications,
)
from .processor import NotificationProcessor, TickSummary
from .queue import enqueue_notification
from .retention import NotificationRetentionJob, purge_sent_notifications
from .service import build_notification_processor, build_retention_job

__all__ = [
    "DispatchOutcome",
    "NotificationDispatcher",
    "notify_new_comment",
    "notify_new_follower",
    "notify_new_video",
    "notify_video_like",
    "MalformedPayloadError",
    "NotificationDigest",
    "build_digest",
    "format_deep_link",
    "partition_notifications",
    "NotificationProcessor",
    "TickSummary",
    "enqueue_notification",
    "NotificationRetentionJob",
    "purge_sent_notifications",
    "build_notification_processor",
    "build_retention_job",
]
