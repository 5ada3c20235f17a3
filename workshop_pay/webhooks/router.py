"""Provider webhook endpoint."""

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse

from workshop_pay.core.exceptions import AuthenticationError
from workshop_pay.core.schemas import OkResponse

from .dependencies import WebhookServiceDep
from .security import SIGNATURE_HEADER


logger = structlog.get_logger(__name__)


router = APIRouter(tags=["webhooks"])


@router.post(
    "/webhook",
    response_model=OkResponse,
    summary="Razorpay webhook",
    responses={400: {"description": "invalid signature"}},
)
async def receive_webhook(
    request: Request,
    webhook_service: WebhookServiceDep,
):
    """Receive a provider event.

    The signature is computed over the raw body, so the body is read as bytes
    and never re-serialized. Every authenticated delivery is acknowledged
    with 200 so the provider does not retry it.
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    try:
        outcome = await webhook_service.handle(body, signature)
    except AuthenticationError as e:
        return PlainTextResponse(e.message, status_code=status.HTTP_400_BAD_REQUEST)

    logger.debug("webhook_handled", outcome=outcome.value)
    return OkResponse()
