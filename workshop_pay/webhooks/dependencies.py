"""FastAPI dependencies for webhook processing."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import WebhookService


_webhook_service_getter: Callable[[], WebhookService] | None = None


def set_webhook_service_getter(getter: Callable[[], WebhookService]) -> None:
    """Set the WebhookService getter (called from main.py)."""
    global _webhook_service_getter  # noqa: PLW0603 - necessary for DI pattern
    _webhook_service_getter = getter


def get_webhook_service() -> WebhookService:
    """Get WebhookService instance.

    Raises:
        RuntimeError: If service is not configured
    """
    if _webhook_service_getter is None:
        msg = "WebhookService not configured"
        raise RuntimeError(msg)
    return _webhook_service_getter()


WebhookServiceDep = Annotated[WebhookService, Depends(get_webhook_service)]
