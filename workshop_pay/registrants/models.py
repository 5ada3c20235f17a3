"""Registrant models and Cassandra schema.

A registrant is created when a payment order is opened and flips to verified
exactly once, when the provider's webhook confirms the payment.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from cassandra.cluster import Row


class LinkKind(str, Enum):
    """Kinds of access links handed out after payment."""

    WHATSAPP = "whatsapp"  # Every verified registrant
    TELEGRAM = "telegram"  # Bundle only
    DOWNLOAD = "download"  # Bundle only


BUNDLE_ONLY_LINKS = (LinkKind.TELEGRAM, LinkKind.DOWNLOAD)


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

REGISTRANTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.registrants (
    order_id TEXT PRIMARY KEY,
    name TEXT,
    email TEXT,
    phone TEXT,
    bundle BOOLEAN,
    payment_id TEXT,
    verified BOOLEAN,
    links MAP<TEXT, TEXT>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# payment_id -> order_id lookup, written when the payment is verified
REGISTRANTS_BY_PAYMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.registrants_by_payment (
    payment_id TEXT PRIMARY KEY,
    order_id TEXT
)
"""

# Newest-first listing, partitioned by creation month
REGISTRANTS_BY_MONTH_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.registrants_by_month (
    month_bucket TEXT,
    created_at TIMESTAMP,
    order_id TEXT,
    PRIMARY KEY ((month_bucket), created_at, order_id)
) WITH CLUSTERING ORDER BY (created_at DESC, order_id ASC)
"""

REGISTRANTS_TABLES_CQL = [
    REGISTRANTS_TABLE_CQL,
    REGISTRANTS_BY_PAYMENT_TABLE_CQL,
    REGISTRANTS_BY_MONTH_TABLE_CQL,
]


# ==============================================================================
# Helpers
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def get_month_bucket(dt: datetime | None = None) -> str:
    """Get the YYYY-MM partition bucket for a timestamp."""
    dt = dt or datetime.now(UTC)
    return dt.strftime("%Y-%m")


def previous_month_bucket(bucket: str) -> str:
    """Get the bucket of the month before ``bucket``."""
    year, month = (int(part) for part in bucket.split("-"))
    if month == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month - 1:02d}"


def assign_links(
    current: dict[str, str],
    bundle: bool,
    configured: dict[LinkKind, str],
) -> dict[str, str]:
    """Fill access links for a verified registrant.

    First write wins: a non-empty value already stored is kept. Missing or
    empty values take the configured URL, or "" when nothing is configured.
    Bundle-only links are never added for non-bundle registrants.
    """
    links = dict(current)
    kinds = [LinkKind.WHATSAPP]
    if bundle:
        kinds.extend(BUNDLE_ONLY_LINKS)

    for kind in kinds:
        links[kind.value] = links.get(kind.value) or configured.get(kind) or ""

    return links


# ==============================================================================
# Entity
# ==============================================================================


@dataclass
class Registrant:
    """A person who opened a payment order for the workshop."""

    order_id: str
    name: str
    email: str
    phone: str | None = None
    bundle: bool = False
    payment_id: str | None = None
    verified: bool = False
    links: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_row(cls, row: "Row") -> "Registrant":
        """Create instance from Cassandra row."""
        return cls(
            order_id=row.order_id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            bundle=bool(row.bundle),
            payment_id=row.payment_id,
            verified=bool(row.verified),
            links=dict(row.links or {}),
            created_at=ensure_utc_aware(row.created_at) or datetime.now(UTC),
            updated_at=ensure_utc_aware(row.updated_at) or datetime.now(UTC),
        )

    def mark_verified(
        self,
        payment_id: str,
        configured_links: dict[LinkKind, str],
    ) -> None:
        """Apply the PENDING -> VERIFIED transition in memory."""
        self.payment_id = payment_id
        self.verified = True
        self.links = assign_links(self.links, self.bundle, configured_links)
        self.updated_at = datetime.now(UTC)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "order_id": self.order_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "bundle": self.bundle,
            "payment_id": self.payment_id,
            "verified": self.verified,
            "links": dict(self.links),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def create_pending_registrant(
    order_id: str,
    name: str,
    email: str,
    phone: str | None = None,
    bundle: bool = False,
) -> Registrant:
    """Create the unverified registrant for a freshly opened order."""
    return Registrant(
        order_id=order_id,
        name=name,
        email=email,
        phone=phone,
        bundle=bundle,
    )
