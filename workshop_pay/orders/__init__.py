"""Payment order creation."""

from .schemas import CreateOrderRequest, CreateOrderResponse
from .service import OrderService


__all__ = ["CreateOrderRequest", "CreateOrderResponse", "OrderService"]
