"""Tests for WebhookService state transitions."""

from types import SimpleNamespace

import orjson
import pytest

from workshop_pay.core.exceptions import AuthenticationError, PersistenceError
from workshop_pay.registrants.models import create_pending_registrant
from workshop_pay.registrants.service import RegistrantService
from workshop_pay.webhooks.security import compute_signature
from workshop_pay.webhooks.service import WebhookOutcome, WebhookService


def captured(order_id: str = "order_1", payment_id: str = "pay_1") -> bytes:
    return orjson.dumps(
        {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id}}},
        }
    )


@pytest.fixture
def signed(settings):
    def _signed(body: bytes) -> tuple[bytes, str]:
        return body, compute_signature(settings.razorpay_webhook_secret, body)

    return _signed


@pytest.fixture
def pending(registrant_store):
    return registrant_store.add(
        create_pending_registrant("order_1", "Asha", "asha@example.com", bundle=False)
    )


class TestAuthentication:
    """Signature handling."""

    @pytest.mark.asyncio
    async def test_bad_signature_rejected(self, webhook_service, registrant_store):
        with pytest.raises(AuthenticationError):
            await webhook_service.handle(captured(), "deadbeef")
        assert registrant_store.save_calls == 0

    @pytest.mark.asyncio
    async def test_missing_signature_rejected(self, webhook_service):
        with pytest.raises(AuthenticationError):
            await webhook_service.handle(captured(), None)

    @pytest.mark.asyncio
    async def test_no_secret_skips_verification(
        self, registrant_store, dispatcher, settings_factory, pending
    ):
        service = WebhookService(
            registrants=registrant_store,
            dispatcher=dispatcher,
            settings=settings_factory(razorpay_webhook_secret=""),
        )

        outcome = await service.handle(captured(), None)

        assert outcome is WebhookOutcome.VERIFIED


class TestTransition:
    """PENDING -> VERIFIED transition."""

    @pytest.mark.asyncio
    async def test_verifies_pending_registrant(
        self, webhook_service, registrant_store, dispatcher, signed, pending
    ):
        outcome = await webhook_service.handle(*signed(captured()))

        assert outcome is WebhookOutcome.VERIFIED
        stored = registrant_store.rows["order_1"]
        assert stored.verified is True
        assert stored.payment_id == "pay_1"
        assert stored.links == {"whatsapp": "https://chat.whatsapp.com/wclan"}
        assert registrant_store.payment_index["pay_1"] == "order_1"
        dispatcher.dispatch.assert_called_once()
        assert dispatcher.dispatch.call_args.args[0].order_id == "order_1"

    @pytest.mark.asyncio
    async def test_redelivery_is_noop(
        self, webhook_service, registrant_store, dispatcher, signed, pending
    ):
        await webhook_service.handle(*signed(captured()))
        before = registrant_store.rows["order_1"]

        outcome = await webhook_service.handle(*signed(captured()))

        assert outcome is WebhookOutcome.ALREADY_VERIFIED
        assert registrant_store.save_calls == 1
        assert dispatcher.dispatch.call_count == 1
        assert registrant_store.rows["order_1"] == before

    @pytest.mark.asyncio
    async def test_unknown_order(self, webhook_service, registrant_store, signed):
        outcome = await webhook_service.handle(*signed(captured(order_id="order_x")))

        assert outcome is WebhookOutcome.UNKNOWN_ORDER
        assert registrant_store.rows == {}

    @pytest.mark.asyncio
    async def test_unrecognized_event(
        self, webhook_service, registrant_store, signed, pending
    ):
        body = orjson.dumps({"event": "refund.processed", "payload": {}})

        outcome = await webhook_service.handle(*signed(body))

        assert outcome is WebhookOutcome.IGNORED
        assert registrant_store.rows["order_1"].verified is False

    @pytest.mark.asyncio
    async def test_malformed_event(self, webhook_service, signed):
        outcome = await webhook_service.handle(*signed(b"{not json"))
        assert outcome is WebhookOutcome.MALFORMED

    @pytest.mark.asyncio
    async def test_store_failure_is_acknowledged(
        self, webhook_service, registrant_store, dispatcher, signed, pending
    ):
        registrant_store.fail_with = PersistenceError("Failed to load registrant")

        outcome = await webhook_service.handle(*signed(captured()))

        assert outcome is WebhookOutcome.STORE_FAILED
        dispatcher.dispatch.assert_not_called()


class TableSession:
    """Cassandra session double keeping the registrant tables in dicts."""

    def __init__(self) -> None:
        self.registrants: dict[str, SimpleNamespace] = {}
        self.by_payment: dict[str, str] = {}
        self.payment_index_failures = 0

    def prepare(self, cql: str) -> str:
        return cql

    async def aexecute(self, statement: str, params: list):
        if "registrants_by_payment" in statement:
            if "INSERT" in statement:
                if self.payment_index_failures:
                    self.payment_index_failures -= 1
                    raise RuntimeError("write timeout")
                self.by_payment[params[0]] = params[1]
                return []
            order_id = self.by_payment.get(params[0])
            return ResultSet([SimpleNamespace(order_id=order_id)] if order_id else [])

        if statement.lstrip().startswith("UPDATE"):
            row = self.registrants[params[4]]
            row.payment_id, row.verified, row.links, row.updated_at = params[:4]
            return []

        row = self.registrants.get(params[0])
        return ResultSet([row] if row else [])

    def seed_pending(self, order_id: str) -> None:
        registrant = create_pending_registrant(order_id, "Asha", "asha@example.com")
        self.registrants[order_id] = SimpleNamespace(**vars(registrant))


class ResultSet(list):
    def one(self):
        return self[0] if self else None


class TestPartialWriteRecovery:
    """A verification interrupted between its two writes heals on redelivery."""

    @pytest.fixture
    def table_session(self) -> TableSession:
        session = TableSession()
        session.seed_pending("order_1")
        return session

    @pytest.fixture
    def service(self, table_session, dispatcher, settings) -> WebhookService:
        return WebhookService(
            registrants=RegistrantService(session=table_session, keyspace="ks"),
            dispatcher=dispatcher,
            settings=settings,
        )

    @pytest.mark.asyncio
    async def test_redelivery_after_failed_payment_index(
        self, service, table_session, dispatcher, signed
    ):
        table_session.payment_index_failures = 1

        first = await service.handle(*signed(captured()))
        second = await service.handle(*signed(captured()))

        assert first is WebhookOutcome.STORE_FAILED
        assert second is WebhookOutcome.VERIFIED
        dispatcher.dispatch.assert_called_once()

        registrant = await service.registrants.get_by_payment_id("pay_1")
        assert registrant is not None
        assert registrant.verified is True
        assert registrant.links == {"whatsapp": "https://chat.whatsapp.com/wclan"}

    @pytest.mark.asyncio
    async def test_failed_first_write_keeps_payment_hidden(
        self, service, table_session, signed
    ):
        table_session.payment_index_failures = 1

        await service.handle(*signed(captured()))

        assert table_session.registrants["order_1"].verified is False
        assert await service.registrants.get_by_payment_id("pay_1") is None

    @pytest.mark.asyncio
    async def test_redelivery_restores_missing_payment_index(
        self, service, table_session, dispatcher, signed
    ):
        """A verified row whose lookup row was lost is re-indexed."""
        row = table_session.registrants["order_1"]
        row.payment_id = "pay_1"
        row.verified = True
        row.links = {"whatsapp": "https://wa"}

        outcome = await service.handle(*signed(captured()))

        assert outcome is WebhookOutcome.ALREADY_VERIFIED
        assert table_session.by_payment == {"pay_1": "order_1"}
        assert table_session.registrants["order_1"].links == {"whatsapp": "https://wa"}
        dispatcher.dispatch.assert_not_called()
