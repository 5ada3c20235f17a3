"""Tests for registrant models and link assignment."""

from datetime import UTC, datetime
from types import SimpleNamespace

from workshop_pay.registrants.models import (
    LinkKind,
    Registrant,
    assign_links,
    create_pending_registrant,
    get_month_bucket,
    previous_month_bucket,
)


CONFIGURED = {
    LinkKind.WHATSAPP: "https://chat.whatsapp.com/wclan",
    LinkKind.TELEGRAM: "https://t.me/wclan",
    LinkKind.DOWNLOAD: "https://cdn.wclan.in/bundle.zip",
}


class TestAssignLinks:
    """Tests for first-write-wins link assignment."""

    def test_non_bundle_gets_whatsapp_only(self):
        links = assign_links({}, bundle=False, configured=CONFIGURED)
        assert links == {"whatsapp": "https://chat.whatsapp.com/wclan"}

    def test_bundle_gets_all_links(self):
        links = assign_links({}, bundle=True, configured=CONFIGURED)
        assert links == {
            "whatsapp": "https://chat.whatsapp.com/wclan",
            "telegram": "https://t.me/wclan",
            "download": "https://cdn.wclan.in/bundle.zip",
        }

    def test_existing_links_are_kept(self):
        """A stored non-empty link is never replaced."""
        links = assign_links(
            {"whatsapp": "https://chat.whatsapp.com/old"},
            bundle=False,
            configured=CONFIGURED,
        )
        assert links["whatsapp"] == "https://chat.whatsapp.com/old"

    def test_empty_links_are_filled(self):
        links = assign_links({"whatsapp": ""}, bundle=False, configured=CONFIGURED)
        assert links["whatsapp"] == "https://chat.whatsapp.com/wclan"

    def test_unconfigured_link_is_empty_string(self):
        links = assign_links({}, bundle=True, configured={})
        assert links == {"whatsapp": "", "telegram": "", "download": ""}

    def test_input_is_not_mutated(self):
        current = {"whatsapp": ""}
        assign_links(current, bundle=True, configured=CONFIGURED)
        assert current == {"whatsapp": ""}


class TestRegistrant:
    """Tests for the Registrant entity."""

    def test_pending_registrant_defaults(self):
        registrant = create_pending_registrant(
            order_id="order_1", name="Asha", email="asha@example.com"
        )
        assert registrant.verified is False
        assert registrant.payment_id is None
        assert registrant.links == {}
        assert registrant.bundle is False

    def test_mark_verified(self):
        registrant = create_pending_registrant(
            order_id="order_1", name="Asha", email="asha@example.com", bundle=True
        )
        created_at = registrant.created_at

        registrant.mark_verified("pay_1", CONFIGURED)

        assert registrant.verified is True
        assert registrant.payment_id == "pay_1"
        assert set(registrant.links) == {"whatsapp", "telegram", "download"}
        assert registrant.created_at == created_at

    def test_from_row_handles_nulls_and_naive_datetimes(self):
        row = SimpleNamespace(
            order_id="order_1",
            name="Asha",
            email="asha@example.com",
            phone=None,
            bundle=None,
            payment_id=None,
            verified=None,
            links=None,
            created_at=datetime(2025, 1, 2, 3, 4, 5),
            updated_at=None,
        )

        registrant = Registrant.from_row(row)

        assert registrant.bundle is False
        assert registrant.verified is False
        assert registrant.links == {}
        assert registrant.created_at.tzinfo is UTC

    def test_to_dict(self):
        registrant = create_pending_registrant(
            order_id="order_1", name="Asha", email="asha@example.com"
        )
        data = registrant.to_dict()
        assert data["order_id"] == "order_1"
        assert data["verified"] is False
        assert isinstance(data["created_at"], str)


class TestMonthBuckets:
    """Tests for listing partition helpers."""

    def test_get_month_bucket(self):
        assert get_month_bucket(datetime(2025, 3, 9, tzinfo=UTC)) == "2025-03"

    def test_previous_month_bucket(self):
        assert previous_month_bucket("2025-03") == "2025-02"

    def test_previous_month_bucket_wraps_year(self):
        assert previous_month_bucket("2025-01") == "2024-12"
