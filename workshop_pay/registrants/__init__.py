"""Registrant store.

Registrants are created when a payment order is opened and verified once the
provider confirms the payment.
"""

from .models import (
    REGISTRANTS_TABLES_CQL,
    LinkKind,
    Registrant,
    assign_links,
    create_pending_registrant,
)
from .service import RegistrantService


__all__ = [
    "REGISTRANTS_TABLES_CQL",
    "LinkKind",
    "Registrant",
    "RegistrantService",
    "assign_links",
    "create_pending_registrant",
]
