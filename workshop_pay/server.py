"""Server entry point.

Binds the first free port starting at API_PORT, so a stale process on the
default port does not prevent startup.
"""

import socket
import sys

import uvicorn

from workshop_pay.config import get_settings
from workshop_pay.core.logging import get_logger


logger = get_logger(__name__)


def is_port_free(host: str, port: int) -> bool:
    """Check whether ``port`` can be bound on ``host``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(host: str, start_port: int, attempts: int) -> int | None:
    """Probe ``start_port``, ``start_port + 1``, ... for a bindable port.

    Returns:
        The first free port, or None if all ``attempts`` ports are taken
    """
    for port in range(start_port, start_port + max(attempts, 1)):
        if is_port_free(host, port):
            return port
        logger.warning("port_in_use", host=host, port=port)
    return None


def run() -> None:
    """Start uvicorn on the first available port."""
    settings = get_settings()

    port = find_available_port(
        settings.api_host, settings.api_port, settings.port_fallback_attempts
    )
    if port is None:
        logger.error(
            "no_free_port",
            host=settings.api_host,
            first_port=settings.api_port,
            attempts=settings.port_fallback_attempts,
        )
        sys.exit(1)

    if port != settings.api_port:
        logger.info("port_fallback", requested=settings.api_port, port=port)

    uvicorn.run(
        "workshop_pay.main:app",
        host=settings.api_host,
        port=port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
