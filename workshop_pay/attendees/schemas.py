"""Pydantic schemas for attendee queries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AttendeeStatusResponse(BaseModel):
    """Verification state and access links for one payment."""

    ok: bool = True
    verified: bool
    links: dict[str, str]


class AttendeeSummary(BaseModel):
    """One row of the diagnostic listing."""

    model_config = ConfigDict(from_attributes=True)

    order_id: str
    name: str
    email: str
    phone: str | None = None
    bundle: bool
    payment_id: str | None = None
    verified: bool
    links: dict[str, str]
    created_at: datetime


class RecentAttendeesResponse(BaseModel):
    """Most recent registrants, newest first."""

    ok: bool = True
    count: int
    list: list[AttendeeSummary]
