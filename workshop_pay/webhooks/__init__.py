"""Provider webhook verification and registrant state transition."""

from .events import (
    MalformedEvent,
    OrderPaidEvent,
    PaymentAuthorizedEvent,
    PaymentCapturedEvent,
    UnrecognizedEvent,
    parse_webhook_event,
)
from .security import compute_signature, verify_signature
from .service import WebhookOutcome, WebhookService


__all__ = [
    "MalformedEvent",
    "OrderPaidEvent",
    "PaymentAuthorizedEvent",
    "PaymentCapturedEvent",
    "UnrecognizedEvent",
    "WebhookOutcome",
    "WebhookService",
    "compute_signature",
    "parse_webhook_event",
    "verify_signature",
]
