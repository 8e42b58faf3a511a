"""Stripe service for checkout sessions and webhook verification.

Uses the v8+ StripeClient pattern. The client is built once by the process
entry point and handed to StripeService; nothing here is a module-level
singleton.
"""

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import stripe
from stripe import StripeClient

from payments.models.checkout import CheckoutResult, PaymentSessionRequest
from payments.models.errors import SignatureVerificationFailed
from payments.utils.logging import log_payment_operation

if TYPE_CHECKING:
    from payments.config import Settings

logger = logging.getLogger(__name__)

STRIPE_SIGNATURE_HEADER = "stripe-signature"


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(
        self,
        message: str,
        stripe_error_code: str | None = None,
        *,
        rejected: bool = False,
    ) -> None:
        """Initialize with message and optional Stripe error details.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
            rejected: True when Stripe refused the request itself
                (invalid parameters) rather than failing to process it.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code
        self.rejected = rejected


def to_minor_units(price: float | Decimal) -> int:
    """Convert a major-unit price to Stripe's integer minor units.

    Rounds half up on the decimal value of the price, so 19.99 becomes 1999
    regardless of binary float representation.
    """
    amount = Decimal(str(price)) * 100
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_line_items(request: PaymentSessionRequest) -> list[dict]:
    """Build one Stripe line item per cart entry."""
    return [
        {
            "price_data": {
                "currency": request.currency,
                "product_data": {"name": item.name},
                "unit_amount": to_minor_units(item.price),
            },
            "quantity": item.quantity,
        }
        for item in request.items
    ]


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Checkout session creation
    - Webhook signature verification

    Usage:
        stripe_svc = StripeService.from_settings(settings)
        result = stripe_svc.create_payment_session(request)
    """

    def __init__(
        self,
        client: StripeClient,
        *,
        webhook_secret: str,
        success_url: str,
        cancel_url: str,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ) -> None:
        """Initialize with a ready Stripe client and redirect configuration.

        Args:
            client: StripeClient bound to the API key.
            webhook_secret: Endpoint signing secret (whsec_xxx).
            success_url: Redirect target after payment.
            cancel_url: Redirect target when the customer cancels.
            tolerance: Maximum signature age in seconds.
        """
        self._client = client
        self._webhook_secret = webhook_secret
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._tolerance = tolerance

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StripeService":
        """Build the service and its StripeClient from settings."""
        client = StripeClient(settings.stripe_secret.get_secret_value())
        logger.info("Stripe client initialized for environment: %s", settings.environment)
        return cls(
            client,
            webhook_secret=settings.stripe_endpoint_secret.get_secret_value(),
            success_url=settings.stripe_success_url,
            cancel_url=settings.stripe_cancel_url,
        )

    def create_payment_session(self, request: PaymentSessionRequest) -> CheckoutResult:
        """Create a hosted Stripe Checkout session for an order.

        Args:
            request: Currency, order reference and cart entries.

        Returns:
            The session's checkout, success and cancel URLs.

        Raises:
            StripeServiceError: If Stripe rejects the request or cannot be reached.
        """
        line_items = build_line_items(request)
        amount_minor = sum(
            item["price_data"]["unit_amount"] * item["quantity"] for item in line_items
        )

        try:
            session = self._client.checkout.sessions.create(
                params={
                    "mode": "payment",
                    "line_items": line_items,
                    # Charges created by the session carry the order reference
                    "payment_intent_data": {
                        "metadata": {"orderId": request.order_id},
                    },
                    "success_url": self._success_url,
                    "cancel_url": self._cancel_url,
                },
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_payment_operation(
                logger,
                "create_payment_session",
                order_id=request.order_id,
                currency=request.currency,
                amount_minor=amount_minor,
                error=f"{e} (code: {error_code})",
            )
            raise StripeServiceError(
                f"Failed to create checkout session: {e}",
                stripe_error_code=error_code,
                rejected=isinstance(e, (stripe.InvalidRequestError, stripe.CardError)),
            ) from e

        log_payment_operation(
            logger,
            "create_payment_session",
            order_id=request.order_id,
            session_id=session.id,
            currency=request.currency,
            amount_minor=amount_minor,
            line_items=len(line_items),
        )

        return CheckoutResult(
            url=session.url,
            success_url=session.success_url,
            cancel_url=session.cancel_url,
        )

    def verify_webhook(self, payload: bytes, signature: str | None) -> dict:
        """Verify a webhook signature and decode the event envelope.

        Args:
            payload: Raw request body bytes, exactly as received.
            signature: Stripe-Signature header value.

        Returns:
            Decoded Stripe event dictionary.

        Raises:
            SignatureVerificationFailed: If the header is missing, the signature
                does not match, or the body cannot be decoded.
        """
        if not signature:
            logger.warning("Webhook request missing Stripe-Signature header")
            raise SignatureVerificationFailed("Missing Stripe-Signature header")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self._webhook_secret, tolerance=self._tolerance
            )
            envelope = json.loads(body)
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed: %s", e)
            raise SignatureVerificationFailed("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Webhook body could not be decoded: %s", e)
            raise SignatureVerificationFailed("Undecodable webhook body") from e

        if not isinstance(envelope, dict):
            logger.warning("Webhook body is not a JSON object")
            raise SignatureVerificationFailed("Webhook body is not an event object")

        logger.info("Webhook signature verified for event: %s", envelope.get("id"))
        return envelope
