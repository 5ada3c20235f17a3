"""Attendee status endpoints.

The payment ID is the only credential for the status lookup: whoever holds it
can read the registrant's links.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from workshop_pay.config.settings import Settings, get_settings
from workshop_pay.core.exceptions import NotFoundError, ValidationError
from workshop_pay.registrants.dependencies import RegistrantServiceDep

from .schemas import AttendeeStatusResponse, AttendeeSummary, RecentAttendeesResponse


logger = structlog.get_logger(__name__)


router = APIRouter(tags=["attendees"])

SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get(
    "/attendee-status/{payment_id}",
    response_model=AttendeeStatusResponse,
    summary="Attendee status by payment ID",
)
async def attendee_status(
    payment_id: str,
    registrants: RegistrantServiceDep,
) -> AttendeeStatusResponse:
    """Return verification state and links for a payment."""
    payment_id = payment_id.strip()
    if not payment_id:
        raise ValidationError("missing payment id")

    registrant = await registrants.get_by_payment_id(payment_id)
    if registrant is None:
        raise NotFoundError("not found")

    return AttendeeStatusResponse(verified=registrant.verified, links=registrant.links)


@router.get(
    "/_recent-attendees",
    response_model=RecentAttendeesResponse,
    summary="Recent registrants (diagnostic)",
    include_in_schema=False,
)
async def recent_attendees(
    registrants: RegistrantServiceDep,
    settings: SettingsDep,
) -> RecentAttendeesResponse:
    """List the newest registrants. Only served when explicitly enabled."""
    if not settings.expose_recent_attendees:
        raise NotFoundError("not found")

    recent = await registrants.list_recent(limit=settings.recent_attendees_limit)
    logger.info("recent_attendees_listed", count=len(recent))

    return RecentAttendeesResponse(
        count=len(recent),
        list=[AttendeeSummary.model_validate(r) for r in recent],
    )
