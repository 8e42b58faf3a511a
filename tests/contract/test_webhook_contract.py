"""Contract tests for POST /api/payments/webhook.

Requests carry real HMAC signatures computed with the test webhook secret;
the message channel sits on a mocked redis client.

Test categories:
- Signature validation (400, empty body, nothing published)
- charge.succeeded forwarding (200)
- Unhandled event types (200, nothing published)
- Redelivery (no deduplication)
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import redis
from fastapi.testclient import TestClient
from starlette.status import HTTP_200_OK, HTTP_400_BAD_REQUEST

from conftest import (
    TEST_WEBHOOK_SECRET,
    create_charge_succeeded_event,
    create_event,
    create_stripe_signature,
    published_payloads,
)

WEBHOOK_PATH = "/api/payments/webhook"

pytestmark = pytest.mark.contract


def _post_event(
    client: TestClient,
    event: dict[str, Any],
    signature: str | None = None,
    secret: str | None = None,
):
    payload = json.dumps(event).encode()
    headers = {"Content-Type": "application/json"}
    if signature is None:
        signature = create_stripe_signature(payload, secret=secret or TEST_WEBHOOK_SECRET)
    if signature:
        headers["Stripe-Signature"] = signature
    return client.post(WEBHOOK_PATH, content=payload, headers=headers), signature


class TestSignatureValidation:
    """Unverifiable requests return 400 with an empty body."""

    def test_missing_signature_header(self, client: TestClient, mock_redis: MagicMock):
        response, _ = _post_event(client, create_charge_succeeded_event(), signature="")

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.content == b""
        mock_redis.publish.assert_not_called()

    def test_invalid_signature(self, client: TestClient, mock_redis: MagicMock):
        response, _ = _post_event(
            client, create_charge_succeeded_event(), signature="t=1234567890,v1=invalid"
        )

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.content == b""
        mock_redis.publish.assert_not_called()

    def test_signature_from_other_secret(self, client: TestClient, mock_redis: MagicMock):
        response, _ = _post_event(
            client, create_charge_succeeded_event(), secret="whsec_attacker"
        )

        assert response.status_code == HTTP_400_BAD_REQUEST
        mock_redis.publish.assert_not_called()

    def test_reserialized_body_fails_verification(
        self, client: TestClient, mock_redis: MagicMock
    ):
        """The signature covers the exact bytes sent by Stripe."""
        event = create_charge_succeeded_event()
        signature = create_stripe_signature(json.dumps(event).encode())
        reserialized = json.dumps(event, indent=2).encode()

        response = client.post(
            WEBHOOK_PATH,
            content=reserialized,
            headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
        )

        assert response.status_code == HTTP_400_BAD_REQUEST
        mock_redis.publish.assert_not_called()


class TestChargeSucceeded:
    """charge.succeeded publishes payment.succeeded."""

    def test_publishes_and_echoes_signature(self, client: TestClient, mock_redis: MagicMock):
        response, signature = _post_event(
            client,
            create_charge_succeeded_event(
                charge_id="ch_1", order_id="order-123", receipt_url="https://r"
            ),
        )

        assert response.status_code == HTTP_200_OK
        assert response.json() == {"sig": signature}
        assert mock_redis.publish.call_count == 1
        assert mock_redis.publish.call_args.args[0] == "payment.succeeded"
        assert published_payloads(mock_redis) == [
            {"stripePaymentId": "ch_1", "orderId": "order-123", "receiptUrl": "https://r"}
        ]

    def test_publish_failure_still_returns_200(self, client: TestClient, mock_redis: MagicMock):
        mock_redis.publish.side_effect = redis.ConnectionError("Connection refused")

        response, signature = _post_event(client, create_charge_succeeded_event())

        assert response.status_code == HTTP_200_OK
        assert response.json() == {"sig": signature}

    def test_missing_order_id_returns_200_without_publish(
        self, client: TestClient, mock_redis: MagicMock
    ):
        response, _ = _post_event(client, create_charge_succeeded_event(order_id=None))

        assert response.status_code == HTTP_200_OK
        mock_redis.publish.assert_not_called()

    def test_redelivered_event_is_published_again(
        self, client: TestClient, mock_redis: MagicMock
    ):
        """No deduplication: consumers see both deliveries."""
        event = create_charge_succeeded_event()
        payload = json.dumps(event).encode()
        headers = {
            "Stripe-Signature": create_stripe_signature(payload),
            "Content-Type": "application/json",
        }

        first = client.post(WEBHOOK_PATH, content=payload, headers=headers)
        second = client.post(WEBHOOK_PATH, content=payload, headers=headers)

        assert first.status_code == HTTP_200_OK
        assert second.status_code == HTTP_200_OK
        assert mock_redis.publish.call_count == 2


class TestUnhandledEvents:
    """Other event types are acknowledged and discarded."""

    @pytest.mark.parametrize(
        "event_type",
        ["charge.failed", "charge.refunded", "checkout.session.completed"],
    )
    def test_returns_200_without_publish(
        self, client: TestClient, mock_redis: MagicMock, event_type: str
    ):
        response, signature = _post_event(client, create_event(event_type))

        assert response.status_code == HTTP_200_OK
        assert response.json() == {"sig": signature}
        mock_redis.publish.assert_not_called()


class TestCorrelationId:
    """Correlation ID propagation on webhook responses."""

    def test_echoes_incoming_correlation_id(self, client: TestClient):
        payload = json.dumps(create_event("charge.failed")).encode()

        response = client.post(
            WEBHOOK_PATH,
            content=payload,
            headers={
                "Stripe-Signature": create_stripe_signature(payload),
                "X-Correlation-ID": "req-abc",
            },
        )

        assert response.headers["X-Correlation-ID"] == "req-abc"

    def test_generates_correlation_id_on_rejection(self, client: TestClient):
        response = client.post(WEBHOOK_PATH, content=b"{}")

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.headers["X-Correlation-ID"]
