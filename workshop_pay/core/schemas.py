"""Response envelopes shared by every endpoint.

Successful responses carry ``ok: true``; failures carry ``ok: false`` and a
short ``error`` message.
"""

from pydantic import BaseModel


class OkResponse(BaseModel):
    """Bare acknowledgement."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Error envelope returned for every handled failure."""

    ok: bool = False
    error: str
