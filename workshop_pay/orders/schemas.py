"""Pydantic schemas for order creation."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    """Checkout form submitted by the browser.

    Required fields are declared optional so that a missing value yields the
    combined "Missing required fields" message instead of a per-field error.
    """

    model_config = ConfigDict(extra="ignore")

    amount: int | None = Field(
        None, description="Amount in the currency's smallest unit (paise)"
    )
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    bundle: bool | None = False


class CreateOrderResponse(BaseModel):
    """Provider order handed back to the checkout widget."""

    ok: bool = True
    order: dict[str, Any]
