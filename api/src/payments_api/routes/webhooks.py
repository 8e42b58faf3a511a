"""Webhook endpoint for Stripe events.

Does NOT require authentication: requests are verified with the Stripe
signature over the exact raw body.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.status import HTTP_200_OK, HTTP_400_BAD_REQUEST

from payments.models.errors import SignatureVerificationFailed
from payments.services.stripe_service import STRIPE_SIGNATURE_HEADER
from payments.services.webhook_handler import WebhookHandler
from payments.utils.logging import get_logger
from payments_api.dependencies import get_webhook_handler

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/payments/webhook",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- charge.succeeded: publishes `payment.succeeded` with stripePaymentId, orderId and receiptUrl

Every other verified event is acknowledged and ignored.

**Not idempotent**: a redelivered event is published again.
""",
    responses={
        200: {"description": "Event verified and handled or ignored"},
        400: {"description": "Missing or invalid signature (empty body)"},
    },
)
async def stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> Response:
    """Verify the signature, dispatch the event and echo the signature header."""
    signature = request.headers.get(STRIPE_SIGNATURE_HEADER)

    # Signature covers the raw bytes; never re-serialize before verifying
    payload = await request.body()

    try:
        await run_in_threadpool(handler.handle, payload, signature)
    except SignatureVerificationFailed as e:
        logger.warning("Rejected webhook request: %s", e)
        return Response(status_code=HTTP_400_BAD_REQUEST)

    return JSONResponse(status_code=HTTP_200_OK, content={"sig": signature})
