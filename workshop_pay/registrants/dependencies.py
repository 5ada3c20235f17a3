"""FastAPI dependencies for the registrant store."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import RegistrantService


# Service getter function (set from main.py)
_service_getter: Callable[[], RegistrantService] | None = None


def set_registrant_service_getter(getter: Callable[[], RegistrantService]) -> None:
    """Set the service getter function.

    Called from main.py to inject the service factory.
    """
    global _service_getter  # noqa: PLW0603 - necessary for DI pattern
    _service_getter = getter


def get_registrant_service() -> RegistrantService:
    """Get RegistrantService instance.

    Raises:
        RuntimeError: If service is not configured
    """
    if _service_getter is None:
        msg = "RegistrantService not configured"
        raise RuntimeError(msg)
    return _service_getter()


RegistrantServiceDep = Annotated[RegistrantService, Depends(get_registrant_service)]
