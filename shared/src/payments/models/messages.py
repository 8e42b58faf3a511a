"""Messages published on the message channel and webhook processing results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PAYMENT_SUCCEEDED_TOPIC = "payment.succeeded"

ProcessingResult = Literal["published", "publish_failed", "skipped", "ignored"]


class PaymentSucceededMessage(BaseModel):
    """Payload of the ``payment.succeeded`` topic.

    Serialized with camelCase keys: stripePaymentId, orderId, receiptUrl.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    stripe_payment_id: str = Field(..., examples=["ch_1"])
    order_id: str = Field(..., examples=["order-123"])
    receipt_url: str | None = Field(default=None, examples=["https://pay.stripe.com/receipts/..."])

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class PublishResult(BaseModel):
    """Outcome of a single publish attempt."""

    model_config = ConfigDict(frozen=True)

    topic: str
    delivered: bool
    receivers: int | None = Field(
        default=None,
        description="Subscribers that received the message, as reported by the broker",
    )
    error: str | None = None


class WebhookOutcome(BaseModel):
    """Result of handling one verified webhook request."""

    event_id: str | None = None
    event_type: str
    processing_result: ProcessingResult
    message: PaymentSucceededMessage | None = None
    publish: PublishResult | None = None
