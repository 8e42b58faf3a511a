"""Webhook handler for processing Stripe events.

Business logic for webhook events, kept separate from HTTP routing so it can
be unit tested without a server.

Events are not deduplicated: a redelivered ``charge.succeeded`` is published
again. Consumers of ``payment.succeeded`` must tolerate duplicates.
"""

from payments.models.messages import (
    PAYMENT_SUCCEEDED_TOPIC,
    PaymentSucceededMessage,
    WebhookOutcome,
)
from payments.models.stripe_webhook import (
    ChargeSucceededEvent,
    UnhandledEvent,
    WebhookEvent,
    parse_webhook_event,
)
from payments.services.message_channel import MessageChannel
from payments.services.stripe_service import StripeService
from payments.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)


class WebhookHandler:
    """Verifies Stripe webhook requests and forwards successful charges."""

    def __init__(self, stripe_service: StripeService, channel: MessageChannel) -> None:
        self._stripe = stripe_service
        self._channel = channel

    def handle(self, payload: bytes, signature: str | None) -> WebhookOutcome:
        """Verify and dispatch one webhook request.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            What was done with the event.

        Raises:
            SignatureVerificationFailed: If the request cannot be verified.
                Nothing is published in that case.
        """
        envelope = self._stripe.verify_webhook(payload, signature)
        event = parse_webhook_event(envelope)

        log_webhook_event(logger, event.event_type, event.event_id, result="received")

        return self.dispatch(event)

    def dispatch(self, event: WebhookEvent) -> WebhookOutcome:
        """Act on a verified event according to its variant."""
        if isinstance(event, ChargeSucceededEvent):
            return self.process_charge_succeeded(event)
        if isinstance(event, UnhandledEvent):
            log_webhook_event(logger, event.event_type, event.event_id, result="ignored")
            return WebhookOutcome(
                event_id=event.event_id,
                event_type=event.event_type,
                processing_result="ignored",
            )
        raise TypeError(f"Unknown webhook event variant: {type(event).__name__}")

    def process_charge_succeeded(self, event: ChargeSucceededEvent) -> WebhookOutcome:
        """Publish a payment.succeeded message for a successful charge.

        Charges without an orderId in their metadata were not created through
        a payment session of this service and are skipped.
        """
        if not event.order_id:
            log_webhook_event(
                logger,
                event.event_type,
                event.event_id,
                charge_id=event.charge_id,
                result="skipped",
                reason="missing orderId in charge metadata",
            )
            return WebhookOutcome(
                event_id=event.event_id,
                event_type=event.event_type,
                processing_result="skipped",
            )

        message = PaymentSucceededMessage(
            stripe_payment_id=event.charge_id,
            order_id=event.order_id,
            receipt_url=event.receipt_url,
        )
        publish = self._channel.emit(PAYMENT_SUCCEEDED_TOPIC, message.to_payload())
        result = "published" if publish.delivered else "publish_failed"

        log_webhook_event(
            logger,
            event.event_type,
            event.event_id,
            order_id=event.order_id,
            charge_id=event.charge_id,
            result=result,
            error=publish.error,
        )

        return WebhookOutcome(
            event_id=event.event_id,
            event_type=event.event_type,
            processing_result=result,
            message=message,
            publish=publish,
        )
