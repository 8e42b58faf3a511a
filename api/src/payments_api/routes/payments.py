"""Checkout endpoints.

Provides REST endpoints for:
- Creating a hosted Stripe Checkout session for an order
- Success and cancel redirect landing pages
"""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from payments.models.checkout import CheckoutResult, PaymentSessionRequest
from payments.models.errors import (
    ErrorCode,
    ErrorResponse,
    PaymentsError,
    get_user_friendly_stripe_message,
    is_stripe_error_retryable,
)
from payments.services.stripe_service import StripeService, StripeServiceError
from payments_api.dependencies import get_stripe_service

router = APIRouter(tags=["payments"])


@router.post(
    "/payments/create-payment-session",
    summary="Create checkout session",
    description="""
Create a hosted Stripe Checkout session for an order.

Each cart entry becomes one line item; prices are given in major currency
units and sent to Stripe in minor units. The order ID is attached to the
payment as metadata so the `charge.succeeded` webhook can reference it.
""",
    response_model=CheckoutResult,
    status_code=HTTP_201_CREATED,
    responses={
        201: {"description": "Checkout session created"},
        400: {"description": "Stripe rejected the request", "model": ErrorResponse},
        422: {"description": "Invalid request body"},
        502: {"description": "Stripe unavailable or misconfigured", "model": ErrorResponse},
    },
)
def create_payment_session(
    body: PaymentSessionRequest,
    stripe_service: StripeService = Depends(get_stripe_service),
) -> CheckoutResult:
    """Create a checkout session and return its redirect URLs."""
    try:
        return stripe_service.create_payment_session(body)
    except StripeServiceError as e:
        details = {
            "message": get_user_friendly_stripe_message(e.stripe_error_code),
            "retryable": str(is_stripe_error_retryable(e.stripe_error_code)).lower(),
        }
        if e.stripe_error_code:
            details["stripe_error_code"] = e.stripe_error_code
        raise PaymentsError(
            code=ErrorCode.PAYMENT_SESSION_REJECTED if e.rejected else ErrorCode.STRIPE_API_ERROR,
            details=details,
        ) from e


@router.get("/payments/success", summary="Checkout success landing")
def payment_success() -> dict[str, Any]:
    return {"ok": True, "message": "Payment successful"}


@router.get("/payments/cancel", summary="Checkout cancel landing")
def payment_cancelled() -> dict[str, Any]:
    return {"ok": False, "message": "Payment cancelled"}
