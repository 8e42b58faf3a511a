"""Standard error codes for the payments service.

Domain errors raised by services carry one of these codes; the API layer
converts them to HTTP responses with a consistent JSON body.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error codes surfaced to API callers."""

    STRIPE_API_ERROR = "ERR_STRIPE_002"
    PAYMENT_SESSION_REJECTED = "ERR_STRIPE_003"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.STRIPE_API_ERROR: "Stripe API error occurred",
    ErrorCode.PAYMENT_SESSION_REJECTED: "Stripe rejected the payment session request",
}

# Recovery suggestions for callers
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.STRIPE_API_ERROR: "Try again or contact support",
    ErrorCode.PAYMENT_SESSION_REJECTED: "Check currency code and line items, then retry",
}


class ErrorResponse(BaseModel):
    """Standard error body returned by the API."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class PaymentsError(Exception):
    """Exception raised by payment operations.

    Caught by the API exception handler and converted to an ErrorResponse.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)


class SignatureVerificationFailed(Exception):
    """Raised when a webhook request cannot be verified or decoded.

    Bad signatures, stale timestamps, missing headers and undecodable bodies
    all collapse into this one error.
    """


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("Invalid configuration: " + "; ".join(problems))


# Stripe error code to user-friendly message mapping
STRIPE_ERROR_MESSAGES: dict[str, str] = {
    "amount_too_small": "The order total is below the minimum amount Stripe accepts.",
    "amount_too_large": "The order total exceeds the maximum amount Stripe accepts.",
    "parameter_invalid_integer": "A line item amount or quantity is not a valid integer.",
    "parameter_invalid_empty": "A required checkout field was empty.",
    "url_invalid": "A redirect URL is not valid.",
    "api_key_expired": "The payment provider credentials have expired.",
    # Processing errors - may be retryable
    "processing_error": "A processing error occurred. Please try again.",
    "rate_limit": "Too many requests. Please wait a moment and try again.",
}

# Stripe error codes that indicate the caller may retry
STRIPE_RETRYABLE_ERRORS: set[str] = {
    "processing_error",
    "rate_limit",
    "lock_timeout",
    "api_connection_error",
}


def get_user_friendly_stripe_message(
    stripe_error_code: Optional[str],
    default_message: str = "Payment session could not be created. Please try again.",
) -> str:
    """Get a user-friendly message for a Stripe error code.

    Args:
        stripe_error_code: The Stripe error code (e.g., 'amount_too_small').
        default_message: Message to use if error code is unknown.

    Returns:
        User-friendly error message.
    """
    if stripe_error_code and stripe_error_code in STRIPE_ERROR_MESSAGES:
        return STRIPE_ERROR_MESSAGES[stripe_error_code]
    return default_message


def is_stripe_error_retryable(stripe_error_code: Optional[str]) -> bool:
    """Check if a Stripe error is likely transient and retryable."""
    return stripe_error_code in STRIPE_RETRYABLE_ERRORS if stripe_error_code else False
