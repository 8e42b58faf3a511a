"""FastAPI dependency providers for shared services.

Services are built once by the application factory (or its lifespan) and
stored on ``app.state``. These providers hand them to route handlers.

Usage in routes:
    from payments_api.dependencies import get_stripe_service

    @router.post("/payments/create-payment-session")
    def create_payment_session(
        stripe_service: StripeService = Depends(get_stripe_service),
    ):
        ...

Testing:
    Build the app with create_app(settings, stripe_service=..., channel=...)
    or use app.dependency_overrides.
"""

from fastapi import Request

from payments.config import Settings
from payments.services.message_channel import MessageChannel
from payments.services.stripe_service import StripeService
from payments.services.webhook_handler import WebhookHandler


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"Service '{name}' is not initialized; is the app lifespan running?")
    return value


def get_settings(request: Request) -> Settings:
    return _state(request, "settings")


def get_stripe_service(request: Request) -> StripeService:
    return _state(request, "stripe_service")


def get_message_channel(request: Request) -> MessageChannel:
    return _state(request, "message_channel")


def get_webhook_handler(request: Request) -> WebhookHandler:
    return _state(request, "webhook_handler")
