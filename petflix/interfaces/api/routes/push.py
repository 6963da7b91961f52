"""Endpoints to manage the browser push subscriptions of the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from petflix.application.use_cases.push_subscriptions import (
    subscribe,
    unsubscribe,
    unsubscribe_all,
)
from petflix.config import get_settings
from petflix.domain.entities import User
from petflix.infrastructure.database import get_db
from petflix.interfaces.api.dependencies import get_current_user
from petflix.interfaces.api.schemas import (
    MessageResponse,
    PublicKeyResponse,
    PushSubscribeResponse,
    PushSubscriptionCreate,
    PushSubscriptionRead,
    PushUnsubscribeAllResponse,
    PushUnsubscribeRequest,
)

router = APIRouter(prefix="/push", tags=["push"])


@router.get("/public-key", response_model=PublicKeyResponse)
def get_public_key() -> PublicKeyResponse:
    """Return the VAPID public key browsers need to subscribe."""

    public_key = get_settings().vapid_public_key
    if not public_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="VAPID public key not configured",
        )
    return PublicKeyResponse(public_key=public_key)


@router.post(
    "/subscribe",
    response_model=PushSubscribeResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    payload: PushSubscriptionCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PushSubscribeResponse:
    try:
        subscription, created = subscribe(
            db,
            user_id=current_user.id,
            endpoint=payload.endpoint,
            p256dh=payload.keys.p256dh,
            auth=payload.keys.auth,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not created:
        response.status_code = status.HTTP_200_OK
    return PushSubscribeResponse(
        message=(
            "Successfully subscribed to push notifications"
            if created
            else "Subscription already exists"
        ),
        subscription=PushSubscriptionRead(
            id=subscription.id or 0,
            endpoint=subscription.endpoint,
            created_at=subscription.created_at,
        ),
    )


@router.delete("/unsubscribe", response_model=MessageResponse)
def delete_subscription(
    payload: PushUnsubscribeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    try:
        unsubscribe(db, user_id=current_user.id, endpoint=payload.endpoint)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MessageResponse(message="Successfully unsubscribed from push notifications")


@router.delete("/unsubscribe-all", response_model=PushUnsubscribeAllResponse)
def delete_all_subscriptions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PushUnsubscribeAllResponse:
    removed = unsubscribe_all(db, user_id=current_user.id)
    return PushUnsubscribeAllResponse(
        message="Successfully unsubscribed from all devices", removed=removed
    )
