"""Order creation service.

Opens an order at the payment provider, then records the pending registrant
under the provider's order ID.
"""

import time
from typing import Any

from workshop_pay.config.settings import Settings
from workshop_pay.core.context import set_order_id
from workshop_pay.core.exceptions import ValidationError
from workshop_pay.core.logging import get_logger
from workshop_pay.gateway import RazorpayClient
from workshop_pay.registrants import RegistrantService, create_pending_registrant

from .schemas import CreateOrderRequest


logger = get_logger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: amount,name,email"


def build_receipt(prefix: str) -> str:
    """Build a merchant receipt from the current epoch milliseconds."""
    return f"{prefix}{int(time.time() * 1000)}"


class OrderService:
    """Creates provider orders and their pending registrants."""

    def __init__(
        self,
        gateway: RazorpayClient,
        registrants: RegistrantService,
        settings: Settings,
    ):
        self.gateway = gateway
        self.registrants = registrants
        self.settings = settings

    @staticmethod
    def validate(data: CreateOrderRequest) -> int:
        """Check required fields and return the amount as an integer.

        Raises:
            ValidationError: If a required field is missing or falsy, or the
                amount is negative
        """
        if not data.amount or not data.name or not data.email:
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        if data.amount < 0:
            raise ValidationError("amount must be a positive whole number")

        return data.amount

    async def create_order(self, data: CreateOrderRequest) -> dict[str, Any]:
        """Create the provider order and insert the pending registrant.

        No compensation is attempted: if the insert fails after the provider
        order exists, the order is left orphaned at the provider.

        Raises:
            ValidationError: If required input is missing
            UpstreamError: If the provider call fails
            PersistenceError: If the registrant cannot be stored
        """
        amount = self.validate(data)
        bundle = bool(data.bundle)

        order = await self.gateway.create_order(
            amount=amount,
            currency=self.settings.order_currency,
            receipt=build_receipt(self.settings.order_receipt_prefix),
            payment_capture=1,
        )
        order_id = str(order["id"])
        set_order_id(order_id)

        registrant = create_pending_registrant(
            order_id=order_id,
            name=data.name,
            email=data.email,
            phone=data.phone,
            bundle=bundle,
        )
        await self.registrants.create(registrant)

        logger.info(
            "order_created",
            order_id=order_id,
            amount=amount,
            bundle=bundle,
        )
        return order
