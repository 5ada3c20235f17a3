"""Shared fixtures.

The app is exercised without its lifespan: services are built here over an
in-memory registrant store and swapped in through dependency overrides.
"""

import copy
import os
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("EMAIL_ENABLED", "false")

from workshop_pay.config.settings import Settings, get_settings  # noqa: E402
from workshop_pay.core.exceptions import UpstreamError  # noqa: E402
from workshop_pay.email.dispatcher import NotificationDispatcher  # noqa: E402
from workshop_pay.main import app  # noqa: E402
from workshop_pay.orders.dependencies import get_order_service  # noqa: E402
from workshop_pay.orders.service import OrderService  # noqa: E402
from workshop_pay.registrants.dependencies import get_registrant_service  # noqa: E402
from workshop_pay.registrants.models import Registrant  # noqa: E402
from workshop_pay.webhooks.dependencies import get_webhook_service  # noqa: E402
from workshop_pay.webhooks.service import WebhookService  # noqa: E402


WEBHOOK_SECRET = "whsec_test_secret"

LINKS = {
    "whatsapp_link": "https://chat.whatsapp.com/wclan",
    "telegram_link": "https://t.me/wclan",
    "bundle_download_url": "https://cdn.wclan.in/bundle.zip",
}


class InMemoryRegistrantService:
    """Registrant store double keeping rows in dicts.

    Rows are deep-copied in and out so callers never share state with the
    store, as with a real database.
    """

    def __init__(self) -> None:
        self.rows: dict[str, Registrant] = {}
        self.payment_index: dict[str, str] = {}
        self.save_calls = 0
        self.fail_with: Exception | None = None

    def add(self, registrant: Registrant) -> Registrant:
        """Seed a row directly, bypassing failure injection."""
        self.rows[registrant.order_id] = copy.deepcopy(registrant)
        if registrant.payment_id:
            self.payment_index[registrant.payment_id] = registrant.order_id
        return registrant

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, registrant: Registrant) -> Registrant:
        self._check()
        self.rows[registrant.order_id] = copy.deepcopy(registrant)
        return registrant

    async def get_by_order_id(self, order_id: str) -> Registrant | None:
        self._check()
        row = self.rows.get(order_id)
        return copy.deepcopy(row) if row else None

    async def get_by_payment_id(self, payment_id: str) -> Registrant | None:
        self._check()
        order_id = self.payment_index.get(payment_id)
        registrant = await self.get_by_order_id(order_id) if order_id else None
        return registrant if registrant and registrant.verified else None

    async def save_verification(self, registrant: Registrant) -> None:
        self._check()
        self.save_calls += 1
        self.rows[registrant.order_id] = copy.deepcopy(registrant)
        self.payment_index[registrant.payment_id] = registrant.order_id

    async def index_payment(self, registrant: Registrant) -> None:
        self._check()
        self.payment_index[registrant.payment_id] = registrant.order_id

    async def list_recent(self, limit: int = 30) -> list[Registrant]:
        self._check()
        rows = sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)
        return [copy.deepcopy(r) for r in rows[:limit]]


class FakeRazorpayClient:
    """Gateway double returning sequential order IDs."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.next_ids = iter(f"order_{n}" for n in range(1, 1000))
        self.fail = False

    async def create_order(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(kwargs)
        if self.fail:
            raise UpstreamError("Razorpay API error: 502")
        return {
            "id": next(self.next_ids),
            "entity": "order",
            "amount": kwargs["amount"],
            "currency": kwargs["currency"],
            "receipt": kwargs["receipt"],
            "status": "created",
        }


def make_settings(**overrides: Any) -> Settings:
    """Build settings isolated from any local .env file."""
    values: dict[str, Any] = {
        "environment": "testing",
        "razorpay_key_id": "rzp_test_key",
        "razorpay_key_secret": "rzp_test_secret",
        "razorpay_webhook_secret": WEBHOOK_SECRET,
        "email_enabled": False,
        **LINKS,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def registrant_store() -> InMemoryRegistrantService:
    return InMemoryRegistrantService()


@pytest.fixture
def gateway() -> FakeRazorpayClient:
    return FakeRazorpayClient()


@pytest.fixture
def dispatcher() -> MagicMock:
    return MagicMock(spec=NotificationDispatcher)


@pytest.fixture
def order_service(settings, registrant_store, gateway) -> OrderService:
    return OrderService(gateway=gateway, registrants=registrant_store, settings=settings)


@pytest.fixture
def webhook_service(settings, registrant_store, dispatcher) -> WebhookService:
    return WebhookService(
        registrants=registrant_store, dispatcher=dispatcher, settings=settings
    )


@pytest.fixture
def client(
    settings, registrant_store, order_service, webhook_service
) -> Iterator[TestClient]:
    """Test client wired to the in-memory services (lifespan not run)."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_registrant_service] = lambda: registrant_store
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_webhook_service] = lambda: webhook_service

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
