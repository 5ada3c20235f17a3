"""Webhook processing.

Verifies the delivery signature, decodes the event and applies the one-way
PENDING -> VERIFIED transition to the matching registrant. Re-deliveries for
an already verified registrant only re-upsert the payment lookup row; the
registrant itself is not rewritten and no second email is sent.
"""

from enum import Enum

from workshop_pay.config.settings import Settings
from workshop_pay.core.context import set_order_id
from workshop_pay.core.exceptions import AuthenticationError, PersistenceError
from workshop_pay.core.logging import get_logger
from workshop_pay.email.dispatcher import NotificationDispatcher
from workshop_pay.registrants import LinkKind, RegistrantService

from .events import MalformedEvent, UnrecognizedEvent, parse_webhook_event
from .security import verify_signature


logger = get_logger(__name__)


class WebhookOutcome(str, Enum):
    """How a delivery was handled. Every outcome is acknowledged with 200."""

    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    UNKNOWN_ORDER = "unknown_order"
    IGNORED = "ignored"
    MALFORMED = "malformed"
    STORE_FAILED = "store_failed"


def configured_links(settings: Settings) -> dict[LinkKind, str]:
    """Access link URLs from settings, keyed by link kind."""
    return {
        LinkKind.WHATSAPP: settings.whatsapp_link or "",
        LinkKind.TELEGRAM: settings.telegram_link or "",
        LinkKind.DOWNLOAD: settings.bundle_download_url or "",
    }


class WebhookService:
    """Applies verified provider events to registrants."""

    def __init__(
        self,
        registrants: RegistrantService,
        dispatcher: NotificationDispatcher,
        settings: Settings,
    ):
        self.registrants = registrants
        self.dispatcher = dispatcher
        self.settings = settings

    def authenticate(self, body: bytes, signature: str | None) -> None:
        """Check the delivery signature.

        With no webhook secret configured every delivery is accepted and a
        warning is logged.

        Raises:
            AuthenticationError: If the signature is missing or wrong
        """
        secret = self.settings.razorpay_webhook_secret
        if not secret:
            logger.warning("webhook_signature_unchecked", reason="no_webhook_secret")
            return

        if not verify_signature(secret, body, signature):
            logger.warning(
                "webhook_signature_invalid",
                signature_present=bool(signature),
                body_size=len(body),
            )
            raise AuthenticationError("invalid signature")

    async def handle(self, body: bytes, signature: str | None) -> WebhookOutcome:
        """Authenticate and process one delivery.

        Raises:
            AuthenticationError: If the signature check fails
        """
        self.authenticate(body, signature)

        event = parse_webhook_event(body)

        if isinstance(event, UnrecognizedEvent):
            logger.info("webhook_event_ignored", event_type=event.event)
            return WebhookOutcome.IGNORED

        if isinstance(event, MalformedEvent):
            logger.warning(
                "webhook_event_malformed",
                event_type=event.event,
                reason=event.reason,
            )
            return WebhookOutcome.MALFORMED

        set_order_id(event.order_id)
        logger.info(
            "webhook_payment_event",
            event_type=event.event,
            order_id=event.order_id,
            payment_id=event.payment_id,
        )

        try:
            return await self._verify(event.order_id, event.payment_id)
        except PersistenceError as e:
            logger.error(
                "webhook_store_failed",
                order_id=event.order_id,
                payment_id=event.payment_id,
                error=e.message,
            )
            return WebhookOutcome.STORE_FAILED

    async def _verify(self, order_id: str, payment_id: str) -> WebhookOutcome:
        registrant = await self.registrants.get_by_order_id(order_id)
        if registrant is None:
            logger.warning("webhook_unknown_order", order_id=order_id)
            return WebhookOutcome.UNKNOWN_ORDER

        if registrant.verified:
            logger.info(
                "webhook_already_verified",
                order_id=order_id,
                payment_id=registrant.payment_id,
            )
            # Repairs a lookup row lost to an earlier partial write
            if registrant.payment_id:
                await self.registrants.index_payment(registrant)
            return WebhookOutcome.ALREADY_VERIFIED

        registrant.mark_verified(payment_id, configured_links(self.settings))
        await self.registrants.save_verification(registrant)

        logger.info(
            "registrant_verified",
            order_id=order_id,
            payment_id=payment_id,
            bundle=registrant.bundle,
        )

        self.dispatcher.dispatch(registrant)
        return WebhookOutcome.VERIFIED
