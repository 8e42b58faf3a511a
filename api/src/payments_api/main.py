"""FastAPI application for the payments service.

Provides REST endpoints for:
- Health check
- Stripe Checkout session creation
- Stripe webhook ingestion

The Stripe client and the message channel are built once per process, either
by the caller of create_app() or by the application lifespan, and released on
shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI
from mangum import Mangum

from payments import __version__
from payments.config import Settings, load_settings
from payments.services.message_channel import MessageChannel
from payments.services.stripe_service import StripeService
from payments.services.webhook_handler import WebhookHandler
from payments.utils.logging import configure_logging
from payments_api.dependencies import get_message_channel, get_settings
from payments_api.exceptions import register_exception_handlers
from payments_api.middleware.correlation import CorrelationIdMiddleware
from payments_api.routes.payments import router as payments_router
from payments_api.routes.webhooks import router as webhooks_router

logger = logging.getLogger(__name__)


def _wire(
    app: FastAPI,
    settings: Settings | None,
    stripe_service: StripeService,
    channel: MessageChannel,
) -> None:
    app.state.settings = settings
    app.state.stripe_service = stripe_service
    app.state.message_channel = channel
    app.state.webhook_handler = WebhookHandler(stripe_service, channel)


def create_app(
    settings: Settings | None = None,
    *,
    stripe_service: StripeService | None = None,
    channel: MessageChannel | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration. Loaded from the environment at startup if None.
        stripe_service: Pre-built Stripe service. Built from settings if None.
        channel: Pre-built message channel. Built from settings if None.

    Returns:
        Configured application. When both services are given they are wired
        immediately; otherwise the lifespan builds the missing ones.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned_channel: MessageChannel | None = None
        if getattr(app.state, "webhook_handler", None) is None:
            configure_logging()
            loaded = settings or load_settings()
            svc = stripe_service or StripeService.from_settings(loaded)
            if channel is None:
                owned_channel = MessageChannel.from_settings(loaded)
            _wire(app, loaded, svc, channel or owned_channel)
            logger.info("Payments service started (environment=%s)", loaded.environment)
        try:
            yield
        finally:
            if owned_channel is not None:
                owned_channel.close()

    app = FastAPI(
        title="Payments Service API",
        description="Stripe Checkout sessions and payment notifications",
        version=__version__,
        lifespan=lifespan,
    )

    if stripe_service is not None and channel is not None:
        _wire(app, settings, stripe_service, channel)

    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(payments_router, prefix="/api")
    app.include_router(webhooks_router, prefix="/api")

    @app.get("/api/ping")
    def ping(
        config: Settings = Depends(get_settings),
        channel: MessageChannel = Depends(get_message_channel),
    ) -> dict[str, Any]:
        """Liveness check. A broker outage is reported but does not fail the check."""
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": config.service_name,
            "environment": config.environment,
            "broker": "ok" if channel.ping() else "unreachable",
        }

    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app)


def run_server(host: str = "0.0.0.0", port: int | None = None, reload: bool = False) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: PORT from configuration)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    configure_logging()
    settings = load_settings()
    port = port or settings.port

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "payments_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["api/src", "shared/src"],
        )
    else:
        uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    run_server()
