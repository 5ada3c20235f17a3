"""Webhook event decoding.

Deliveries are decoded into one of:
- a payment event (``payment.captured``, ``payment.authorized``,
  ``order.paid``) carrying the payment and order IDs
- ``UnrecognizedEvent`` for any other event kind
- ``MalformedEvent`` when the body is not JSON or a payment event lacks the
  payment entity
"""

from dataclasses import dataclass
from typing import Annotated, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


# ==============================================================================
# Payment events
# ==============================================================================


class PaymentEntity(BaseModel):
    """The subset of the provider's payment entity this service reads."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)


class PaymentContainer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entity: PaymentEntity


class PaymentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payment: PaymentContainer


class _PaymentEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payload: PaymentPayload

    @property
    def order_id(self) -> str:
        return self.payload.payment.entity.order_id

    @property
    def payment_id(self) -> str:
        return self.payload.payment.entity.id


class PaymentCapturedEvent(_PaymentEvent):
    event: Literal["payment.captured"]


class PaymentAuthorizedEvent(_PaymentEvent):
    event: Literal["payment.authorized"]


class OrderPaidEvent(_PaymentEvent):
    event: Literal["order.paid"]


PaymentEvent = Annotated[
    PaymentCapturedEvent | PaymentAuthorizedEvent | OrderPaidEvent,
    Field(discriminator="event"),
]

PAYMENT_EVENT_KINDS = frozenset({"payment.captured", "payment.authorized", "order.paid"})

_payment_event_adapter = TypeAdapter(PaymentEvent)


# ==============================================================================
# Non-actionable deliveries
# ==============================================================================


@dataclass(frozen=True)
class UnrecognizedEvent:
    """A well-formed delivery of an event kind this service ignores."""

    event: str


@dataclass(frozen=True)
class MalformedEvent:
    """A delivery that could not be decoded."""

    reason: str
    event: str | None = None


WebhookEvent = (
    PaymentCapturedEvent
    | PaymentAuthorizedEvent
    | OrderPaidEvent
    | UnrecognizedEvent
    | MalformedEvent
)


def parse_webhook_event(raw: bytes) -> WebhookEvent:
    """Decode a raw webhook body. Never raises."""
    try:
        body = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return MalformedEvent(reason="invalid_json")

    if not isinstance(body, dict):
        return MalformedEvent(reason="not_an_object")

    kind = body.get("event")
    if not isinstance(kind, str) or kind not in PAYMENT_EVENT_KINDS:
        return UnrecognizedEvent(event=str(kind) if kind is not None else "")

    try:
        return _payment_event_adapter.validate_python(body)
    except PydanticValidationError as e:
        fields = ",".join(
            ".".join(str(loc) for loc in err["loc"]) for err in e.errors()
        )
        return MalformedEvent(reason=f"invalid_payment_entity:{fields}", event=kind)
