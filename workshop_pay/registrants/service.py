# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Registrant store.

Persists registrants keyed by order ID, with a payment ID lookup table and a
month-bucketed listing table. Every Cassandra failure is logged and re-raised
as PersistenceError.
"""

from typing import TYPE_CHECKING

from workshop_pay.core.exceptions import PersistenceError
from workshop_pay.core.logging import get_logger

from .models import Registrant, get_month_bucket, previous_month_bucket


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)

# How many month partitions the recent listing walks back through
RECENT_MONTHS_SCANNED = 12


class RegistrantService:
    """Service for registrant persistence."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with a Cassandra session supporting aexecute()."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_registrant = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.registrants
            (order_id, name, email, phone, bundle, payment_id, verified, links,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_by_month = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.registrants_by_month
            (month_bucket, created_at, order_id)
            VALUES (?, ?, ?)
        """)

        self._get_by_order = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.registrants
            WHERE order_id = ?
        """)

        self._get_order_by_payment = self.session.prepare(f"""
            SELECT order_id FROM {self.keyspace}.registrants_by_payment
            WHERE payment_id = ?
        """)

        self._mark_verified = self.session.prepare(f"""
            UPDATE {self.keyspace}.registrants
            SET payment_id = ?, verified = ?, links = ?, updated_at = ?
            WHERE order_id = ?
        """)

        self._insert_payment_lookup = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.registrants_by_payment
            (payment_id, order_id)
            VALUES (?, ?)
        """)

        self._list_month = self.session.prepare(f"""
            SELECT order_id FROM {self.keyspace}.registrants_by_month
            WHERE month_bucket = ?
            LIMIT ?
        """)

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def create(self, registrant: Registrant) -> Registrant:
        """Insert a new registrant (main table and listing table).

        Raises:
            PersistenceError: If database operation fails
        """
        try:
            await self.session.aexecute(
                self._insert_registrant,
                [
                    registrant.order_id,
                    registrant.name,
                    registrant.email,
                    registrant.phone,
                    registrant.bundle,
                    registrant.payment_id,
                    registrant.verified,
                    registrant.links,
                    registrant.created_at,
                    registrant.updated_at,
                ],
            )
            await self.session.aexecute(
                self._insert_by_month,
                [
                    get_month_bucket(registrant.created_at),
                    registrant.created_at,
                    registrant.order_id,
                ],
            )
        except Exception as e:
            logger.exception(
                "database_error_create_registrant",
                order_id=registrant.order_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(
                "Failed to save registrant", original_error=e
            ) from e

        logger.info(
            "registrant_created",
            order_id=registrant.order_id,
            bundle=registrant.bundle,
        )
        return registrant

    async def save_verification(self, registrant: Registrant) -> None:
        """Index the payment ID, then persist the verified state.

        The lookup row goes first: if the main row update fails the registrant
        stays pending and a redelivery repeats both upserts. A lookup row that
        points at a pending registrant is never served.

        Raises:
            PersistenceError: If database operation fails
        """
        try:
            await self.session.aexecute(
                self._insert_payment_lookup,
                [registrant.payment_id, registrant.order_id],
            )
            await self.session.aexecute(
                self._mark_verified,
                [
                    registrant.payment_id,
                    registrant.verified,
                    registrant.links,
                    registrant.updated_at,
                    registrant.order_id,
                ],
            )
        except Exception as e:
            logger.exception(
                "database_error_save_verification",
                order_id=registrant.order_id,
                payment_id=registrant.payment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(
                "Failed to save payment verification", original_error=e
            ) from e

    async def index_payment(self, registrant: Registrant) -> None:
        """Upsert the payment ID lookup row for a verified registrant.

        Raises:
            PersistenceError: If database operation fails
        """
        try:
            await self.session.aexecute(
                self._insert_payment_lookup,
                [registrant.payment_id, registrant.order_id],
            )
        except Exception as e:
            logger.exception(
                "database_error_index_payment",
                order_id=registrant.order_id,
                payment_id=registrant.payment_id,
                error=str(e),
            )
            raise PersistenceError(
                "Failed to index payment", original_error=e
            ) from e

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get_by_order_id(self, order_id: str) -> Registrant | None:
        """Get registrant by provider order ID."""
        try:
            result = await self.session.aexecute(self._get_by_order, [order_id])
            row = result.one()
        except Exception as e:
            logger.exception(
                "database_error_get_registrant",
                order_id=order_id,
                error=str(e),
            )
            raise PersistenceError("Failed to load registrant", original_error=e) from e

        return Registrant.from_row(row) if row else None

    async def get_by_payment_id(self, payment_id: str) -> Registrant | None:
        """Get registrant by provider payment ID.

        Pending registrants are never returned, even when a lookup row for
        them was written ahead of the verification.
        """
        try:
            result = await self.session.aexecute(
                self._get_order_by_payment, [payment_id]
            )
            row = result.one()
        except Exception as e:
            logger.exception(
                "database_error_get_payment_lookup",
                payment_id=payment_id,
                error=str(e),
            )
            raise PersistenceError("Failed to load registrant", original_error=e) from e

        if not row:
            return None
        registrant = await self.get_by_order_id(row.order_id)
        if registrant is None or not registrant.verified:
            return None
        if registrant.payment_id != payment_id:
            return None
        return registrant

    async def list_recent(self, limit: int = 30) -> list[Registrant]:
        """List the most recently created registrants, newest first."""
        order_ids: list[str] = []
        bucket = get_month_bucket()

        try:
            for _ in range(RECENT_MONTHS_SCANNED):
                result = await self.session.aexecute(
                    self._list_month, [bucket, limit - len(order_ids)]
                )
                order_ids.extend(row.order_id for row in result)
                if len(order_ids) >= limit:
                    break
                bucket = previous_month_bucket(bucket)
        except Exception as e:
            logger.exception("database_error_list_registrants", error=str(e))
            raise PersistenceError(
                "Failed to list registrants", original_error=e
            ) from e

        registrants = []
        for order_id in order_ids:
            registrant = await self.get_by_order_id(order_id)
            if registrant:
                registrants.append(registrant)
        return registrants
