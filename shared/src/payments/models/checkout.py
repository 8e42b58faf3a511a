"""Checkout session models.

JSON field names are camelCase to match the callers of this service;
Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class LineItem(BaseModel):
    """One priced, quantified cart entry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Product name shown on the checkout page")
    price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Unit price in major currency units",
        examples=[19.99],
    )
    quantity: int = Field(..., gt=0, description="Number of units", examples=[2])


class PaymentSessionRequest(BaseModel):
    """Request to create a hosted checkout session for an order."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "currency": "usd",
                    "orderId": "order-123",
                    "items": [{"name": "Keyboard", "price": 19.99, "quantity": 2}],
                }
            ]
        },
    )

    currency: str = Field(..., min_length=1, description="ISO currency code", examples=["usd"])
    order_id: str = Field(
        ...,
        min_length=1,
        description="Order reference attached to the payment as metadata",
        examples=["order-123"],
    )
    items: list[LineItem] = Field(..., min_length=1, description="Cart entries")

    @field_validator("currency")
    @classmethod
    def _lower_currency(cls, value: str) -> str:
        return value.strip().lower()


class CheckoutResult(BaseModel):
    """Redirect URLs of a created checkout session, copied from Stripe."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str | None = Field(default=None, description="Hosted checkout page URL")
    success_url: str | None = Field(default=None, description="Redirect target after payment")
    cancel_url: str | None = Field(default=None, description="Redirect target on cancel")
