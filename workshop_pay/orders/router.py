"""Order creation and client payment report endpoints."""

import orjson
import structlog
from fastapi import APIRouter, Request

from workshop_pay.core.schemas import OkResponse

from .dependencies import OrderServiceDep
from .schemas import CreateOrderRequest, CreateOrderResponse


logger = structlog.get_logger(__name__)


router = APIRouter(tags=["orders"])


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    summary="Create payment order",
)
async def create_order(
    data: CreateOrderRequest,
    order_service: OrderServiceDep,
) -> CreateOrderResponse:
    """Open a provider order and register the attendee as pending.

    Amount is expected in paise. ServiceError subclasses are rendered by the
    application's exception handler.
    """
    order = await order_service.create_order(data)
    return CreateOrderResponse(order=order)


@router.post(
    "/payment-verify",
    response_model=OkResponse,
    summary="Client-side payment report",
)
async def payment_verify(request: Request) -> OkResponse:
    """Log the checkout widget's success callback.

    Advisory only: registrant state changes exclusively through the signed
    webhook.
    """
    raw = await request.body()
    try:
        body = orjson.loads(raw) if raw else None
    except orjson.JSONDecodeError:
        body = raw.decode("utf-8", errors="replace")

    logger.info("payment_verify_reported", body=body)
    return OkResponse()
