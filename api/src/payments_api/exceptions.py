"""FastAPI exception handlers for converting PaymentsError to HTTP responses.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: Stripe refused the request
- 502 Bad Gateway: Stripe could not process the request (auth, network, API)

Usage:
    from payments_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_502_BAD_GATEWAY,
)

from payments.models.errors import ErrorCode, PaymentsError

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.PAYMENT_SESSION_REJECTED: HTTP_400_BAD_REQUEST,
    ErrorCode.STRIPE_API_ERROR: HTTP_502_BAD_GATEWAY,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def payments_error_handler(request: Request, exc: PaymentsError) -> JSONResponse:
    """Convert a PaymentsError to a JSON error response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The PaymentsError exception

    Returns:
        JSONResponse with error details and the mapped status code.
    """
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_error_response().model_dump(mode="json"),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with the validation errors, without echoing rejected input.

    Rejected values such as an infinite price cannot be rendered as JSON.
    """
    errors = [
        {key: value for key, value in error.items() if key != "input"}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(errors)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PaymentsError, payments_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
