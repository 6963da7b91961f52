"""Pydantic models for push subscription requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionCreate(BaseModel):
    """Subscription object produced by ``PushManager.subscribe`` in the browser."""

    endpoint: str = Field(..., min_length=1)
    keys: PushKeys


class PushUnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)


class PushSubscriptionRead(BaseModel):
    id: int
    endpoint: str
    created_at: datetime | None = None


class PushSubscribeResponse(BaseModel):
    message: str
    subscription: PushSubscriptionRead


class PushUnsubscribeAllResponse(BaseModel):
    message: str
    removed: int


class PublicKeyResponse(BaseModel):
    public_key: str


__all__ = [
    "PublicKeyResponse",
    "PushKeys",
    "PushSubscribeResponse",
    "PushSubscriptionCreate",
    "PushSubscriptionRead",
    "PushUnsubscribeAllResponse",
    "PushUnsubscribeRequest",
]
