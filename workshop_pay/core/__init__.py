# Core infrastructure
from workshop_pay.core.context import (
    clear_context,
    get_context,
    get_order_id,
    get_request_id,
    set_order_id,
    set_request_id,
)
from workshop_pay.core.logging import configure_structlog, get_logger
from workshop_pay.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_order_id",
    "get_request_id",
    "set_order_id",
    "set_request_id",
]
