"""Domain models for the payments service."""

from .checkout import CheckoutResult, LineItem, PaymentSessionRequest
from .errors import (
    ConfigurationError,
    ErrorCode,
    ErrorResponse,
    PaymentsError,
    SignatureVerificationFailed,
)
from .messages import (
    PAYMENT_SUCCEEDED_TOPIC,
    PaymentSucceededMessage,
    PublishResult,
    WebhookOutcome,
)
from .stripe_webhook import (
    CHARGE_SUCCEEDED,
    ChargeSucceededEvent,
    UnhandledEvent,
    WebhookEvent,
    parse_webhook_event,
)

__all__ = [
    "CHARGE_SUCCEEDED",
    "ChargeSucceededEvent",
    "CheckoutResult",
    "ConfigurationError",
    "ErrorCode",
    "ErrorResponse",
    "LineItem",
    "PAYMENT_SUCCEEDED_TOPIC",
    "PaymentSessionRequest",
    "PaymentSucceededMessage",
    "PaymentsError",
    "PublishResult",
    "SignatureVerificationFailed",
    "UnhandledEvent",
    "WebhookEvent",
    "WebhookOutcome",
    "parse_webhook_event",
]
