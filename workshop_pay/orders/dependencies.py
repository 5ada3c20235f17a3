"""FastAPI dependencies for order creation."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import OrderService


_order_service_getter: Callable[[], OrderService] | None = None


def set_order_service_getter(getter: Callable[[], OrderService]) -> None:
    """Set the OrderService getter (called from main.py)."""
    global _order_service_getter  # noqa: PLW0603 - necessary for DI pattern
    _order_service_getter = getter


def get_order_service() -> OrderService:
    """Get OrderService instance.

    Raises:
        RuntimeError: If service is not configured
    """
    if _order_service_getter is None:
        msg = "OrderService not configured"
        raise RuntimeError(msg)
    return _order_service_getter()


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
