"""Tests for the Web Push transport."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
import requests
from pywebpush import WebPushException

from petflix.config import Settings
from petflix.domain.entities import PushSubscription
from petflix.infrastructure import push
from petflix.infrastructure.push import (
    PushDeliveryError,
    PushMessage,
    SubscriptionExpiredError,
    WebPushTransport,
    build_push_transport,
)


def _subscription() -> PushSubscription:
    return PushSubscription(
        id=7,
        user_id="user-1",
        endpoint="https://push.example.com/abc",
        p256dh="p256dh-key",
        auth="auth-secret",
    )


def _transport() -> WebPushTransport:
    return WebPushTransport(
        vapid_private_key="private-key",
        vapid_subject="mailto:ops@petflix.com",
        timeout=3,
    )


def _settings(**overrides) -> Settings:
    values = {"database_url": "sqlite://", "secret_key": "secret"}
    values.update(overrides)
    return Settings(**values)


def test_send_posts_the_json_payload(monkeypatch) -> None:
    captured: dict[str, object] = {}

    def _fake_webpush(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(status_code=201)

    monkeypatch.setattr(push, "webpush", _fake_webpush)
    message = PushMessage(title="New Follower!", body="Rex started following you", url="/profile/a1")

    _transport().send(_subscription(), message)

    assert captured["subscription_info"] == {
        "endpoint": "https://push.example.com/abc",
        "keys": {"p256dh": "p256dh-key", "auth": "auth-secret"},
    }
    assert captured["vapid_private_key"] == "private-key"
    assert captured["vapid_claims"] == {"sub": "mailto:ops@petflix.com"}
    assert captured["timeout"] == 3
    data = json.loads(captured["data"])
    assert data["title"] == "New Follower!"
    assert data["body"] == "Rex started following you"
    assert data["data"] == {"url": "/profile/a1"}
    assert data["icon"] == push.DEFAULT_ICON


@pytest.mark.parametrize("status_code", [404, 410])
def test_gone_subscription_raises_expired(monkeypatch, status_code) -> None:
    def _fake_webpush(**kwargs):
        raise WebPushException(
            "Push failed", response=SimpleNamespace(status_code=status_code, text="")
        )

    monkeypatch.setattr(push, "webpush", _fake_webpush)

    with pytest.raises(SubscriptionExpiredError) as excinfo:
        _transport().send(_subscription(), PushMessage(title="t", body="b"))

    assert excinfo.value.status_code == status_code


def test_other_rejections_include_the_service_reason(monkeypatch) -> None:
    def _fake_webpush(**kwargs):
        raise WebPushException(
            "Push failed",
            response=SimpleNamespace(status_code=413, text='{"reason": "Payload too large"}'),
        )

    monkeypatch.setattr(push, "webpush", _fake_webpush)

    with pytest.raises(PushDeliveryError) as excinfo:
        _transport().send(_subscription(), PushMessage(title="t", body="b"))

    assert not isinstance(excinfo.value, SubscriptionExpiredError)
    assert excinfo.value.status_code == 413
    assert "Payload too large" in str(excinfo.value)


def test_network_errors_become_delivery_errors(monkeypatch) -> None:
    def _fake_webpush(**kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(push, "webpush", _fake_webpush)

    with pytest.raises(PushDeliveryError) as excinfo:
        _transport().send(_subscription(), PushMessage(title="t", body="b"))

    assert excinfo.value.status_code is None
    assert "unreachable" in str(excinfo.value)


def test_transport_is_disabled_without_vapid_keys(caplog) -> None:
    with caplog.at_level("WARNING"):
        assert build_push_transport(_settings()) is None

    assert "push notifications are disabled" in caplog.text


def test_transport_is_built_with_vapid_keys() -> None:
    transport = build_push_transport(
        _settings(vapid_public_key="public", vapid_private_key="private")
    )

    assert isinstance(transport, WebPushTransport)
