"""Stripe webhook event variants.

Only ``charge.succeeded`` is acted upon. Every other event type maps to
``UnhandledEvent`` so that callers can branch on the variant type instead of
comparing type strings.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CHARGE_SUCCEEDED = "charge.succeeded"


class ChargeSucceededEvent(BaseModel):
    """A verified ``charge.succeeded`` event."""

    model_config = ConfigDict(frozen=True)

    event_type: Literal["charge.succeeded"] = CHARGE_SUCCEEDED
    event_id: str | None = Field(default=None, description="Stripe event ID (evt_xxx)")
    charge_id: str = Field(..., description="Stripe charge ID (ch_xxx)", examples=["ch_1"])
    order_id: str | None = Field(
        default=None,
        description="Order reference from the charge metadata (orderId)",
        examples=["order-123"],
    )
    receipt_url: str | None = Field(default=None, description="Hosted receipt URL")


class UnhandledEvent(BaseModel):
    """Any verified event this service does not act upon."""

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(..., examples=["charge.failed"])
    event_id: str | None = None


WebhookEvent = ChargeSucceededEvent | UnhandledEvent


def parse_webhook_event(envelope: dict[str, Any]) -> WebhookEvent:
    """Map a decoded Stripe event envelope to its variant.

    Args:
        envelope: Decoded JSON body of a verified webhook request.

    Returns:
        ChargeSucceededEvent for ``charge.succeeded`` with a charge id,
        UnhandledEvent otherwise.
    """
    event_type = str(envelope.get("type") or "")
    event_id = envelope.get("id")

    if event_type == CHARGE_SUCCEEDED:
        charge = (envelope.get("data") or {}).get("object") or {}
        charge_id = charge.get("id")
        if charge_id:
            metadata = charge.get("metadata") or {}
            return ChargeSucceededEvent(
                event_id=event_id,
                charge_id=charge_id,
                order_id=metadata.get("orderId") or None,
                receipt_url=charge.get("receipt_url"),
            )

    return UnhandledEvent(event_type=event_type, event_id=event_id)
