"""Razorpay Orders API client.

Orders are created server-side with the key id / key secret pair, which never
leaves this process. Only the resulting order document is returned to the
browser checkout.
"""

from typing import Any

import httpx
import structlog

from workshop_pay.config.settings import Settings
from workshop_pay.core.exceptions import UpstreamError


logger = structlog.get_logger(__name__)


class RazorpayClient:
    """Thin async client over the Razorpay REST API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._base_url = settings.razorpay_api_base_url.rstrip("/")
        self._timeout = settings.razorpay_timeout

    @property
    def is_configured(self) -> bool:
        """Check if API credentials are present."""
        return self.settings.razorpay_configured

    def _auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(
            self.settings.razorpay_key_id or "",
            self.settings.razorpay_key_secret or "",
        )

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        payment_capture: int = 1,
    ) -> dict[str, Any]:
        """Create an order at the provider.

        Args:
            amount: Amount in the currency's smallest unit (paise for INR)
            currency: ISO currency code
            receipt: Merchant receipt reference
            payment_capture: 1 to auto-capture authorized payments

        Returns:
            The provider's order document (contains at least ``id``)

        Raises:
            UpstreamError: If credentials are missing or the call fails
        """
        if not self.is_configured:
            raise UpstreamError("Razorpay credentials are not configured")

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": payment_capture,
        }
        url = f"{self._base_url}/orders"

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload, auth=self._auth())

                if response.status_code != httpx.codes.OK:
                    logger.error(
                        "razorpay_order_failed",
                        status_code=response.status_code,
                        response_text=response.text[:500],
                        receipt=receipt,
                    )
                    raise UpstreamError(
                        f"Razorpay API error: {response.status_code}"
                    )

                order = response.json()

        except httpx.TimeoutException as e:
            logger.error("razorpay_timeout", error=str(e), receipt=receipt)
            raise UpstreamError("Razorpay API timeout", original_error=e) from e
        except httpx.RequestError as e:
            logger.error("razorpay_request_error", error=str(e), receipt=receipt)
            raise UpstreamError(
                f"Razorpay API request error: {e}", original_error=e
            ) from e
        except ValueError as e:
            logger.error("razorpay_invalid_response", error=str(e), receipt=receipt)
            raise UpstreamError(
                "Razorpay API returned invalid JSON", original_error=e
            ) from e

        if not isinstance(order, dict) or not order.get("id"):
            logger.error("razorpay_order_missing_id", receipt=receipt)
            raise UpstreamError("Razorpay API returned an order without id")

        logger.info(
            "razorpay_order_created",
            order_id=order["id"],
            amount=amount,
            currency=currency,
            receipt=receipt,
        )
        return order
