"""Pytest configuration and fixtures for the payments service tests.

This module provides reusable fixtures for testing:
- Settings with test Stripe credentials
- Mocked StripeClient and redis client
- A FastAPI app wired with real services around those mocks
- Stripe webhook signature generation
"""

import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from payments.config import Settings
from payments.services.message_channel import MessageChannel
from payments.services.stripe_service import StripeService
from payments_api.main import create_app

# === Environment Setup ===

# Fake credentials for moto; never talk to real AWS from unit tests
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


# === Test Configuration ===

TEST_STRIPE_SECRET = "sk_test_abc123xyz"
TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_SUCCESS_URL = "https://shop.example.com/payments/success"
TEST_CANCEL_URL = "https://shop.example.com/payments/cancel"
TEST_ORDER_ID = "order-123"


def create_stripe_signature(
    payload: bytes,
    secret: str = TEST_WEBHOOK_SECRET,
    timestamp: int | None = None,
) -> str:
    """Create a valid Stripe webhook signature.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    ts = str(int(time.time()) if timestamp is None else timestamp)
    signed_payload = f"{ts}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts},v1={signature}"


def create_charge_succeeded_event(
    event_id: str = "evt_1ChargeSucceeded",
    charge_id: str = "ch_1",
    order_id: str | None = TEST_ORDER_ID,
    receipt_url: str | None = "https://r",
) -> dict[str, Any]:
    """Create a charge.succeeded webhook event."""
    metadata = {"orderId": order_id} if order_id is not None else {}
    return {
        "id": event_id,
        "object": "event",
        "type": "charge.succeeded",
        "created": int(time.time()),
        "data": {
            "object": {
                "id": charge_id,
                "object": "charge",
                "amount": 3998,
                "currency": "usd",
                "paid": True,
                "metadata": metadata,
                "receipt_url": receipt_url,
            },
        },
    }


def create_event(event_type: str, event_id: str = "evt_2Other") -> dict[str, Any]:
    """Create a webhook event of an arbitrary type."""
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "data": {"object": {"id": "ch_failed_1", "object": "charge", "metadata": {}}},
    }


# === Fixtures ===


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials and redirect URLs."""
    return Settings(
        stripe_secret=TEST_STRIPE_SECRET,
        stripe_endpoint_secret=TEST_WEBHOOK_SECRET,
        stripe_success_url=TEST_SUCCESS_URL,
        stripe_cancel_url=TEST_CANCEL_URL,
    )


@pytest.fixture
def mock_stripe_client() -> MagicMock:
    """Mock StripeClient returning a checkout session."""
    client = MagicMock()
    session = MagicMock()
    session.id = "cs_test_123"
    session.url = "https://checkout.stripe.com/c/pay/cs_test_123"
    session.success_url = TEST_SUCCESS_URL
    session.cancel_url = TEST_CANCEL_URL
    client.checkout.sessions.create.return_value = session
    return client


@pytest.fixture
def stripe_service(mock_stripe_client: MagicMock) -> StripeService:
    """StripeService around the mocked client."""
    return StripeService(
        mock_stripe_client,
        webhook_secret=TEST_WEBHOOK_SECRET,
        success_url=TEST_SUCCESS_URL,
        cancel_url=TEST_CANCEL_URL,
    )


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock redis client; PUBLISH reports one subscriber."""
    client = MagicMock()
    client.publish.return_value = 1
    client.ping.return_value = True
    return client


@pytest.fixture
def channel(mock_redis: MagicMock) -> MessageChannel:
    """MessageChannel around the mocked redis client."""
    return MessageChannel(mock_redis, source="payments-service")


@pytest.fixture
def app(settings: Settings, stripe_service: StripeService, channel: MessageChannel) -> FastAPI:
    """FastAPI app wired with the test services."""
    return create_app(settings, stripe_service=stripe_service, channel=channel)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for API."""
    return TestClient(app)


@pytest.fixture
def sign() -> Callable[..., str]:
    """Signature factory bound to the test webhook secret."""
    return create_stripe_signature


def published_payloads(mock_redis: MagicMock) -> list[dict[str, Any]]:
    """Decode the `data` of every envelope published on the mock redis client."""
    return [json.loads(call.args[1])["data"] for call in mock_redis.publish.call_args_list]
