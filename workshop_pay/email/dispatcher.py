"""Fire-and-forget notification dispatcher.

Key features:
- Non-blocking dispatch via asyncio.Queue.put_nowait()
- Graceful degradation (drop + log on queue full)
- Send failures are logged and never reach the caller
- Remaining queue is drained on shutdown
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog


if TYPE_CHECKING:
    from workshop_pay.registrants.models import Registrant

    from .service import EmailService


logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Delivers post-payment emails on a background worker.

    Without an email service, dispatch() is a no-op.
    """

    def __init__(
        self,
        email_service: EmailService | None = None,
        queue_size: int = 1000,
        poll_interval: float = 1.0,
        stop_timeout: float = 5.0,
    ) -> None:
        """Initialize dispatcher.

        Args:
            email_service: Mail relay client, or None when email is disabled
            queue_size: Maximum pending notifications (new ones dropped when full)
            poll_interval: Seconds the worker waits on an empty queue before
                re-checking whether it should stop
            stop_timeout: Seconds stop() waits for the worker
        """
        self.email_service = email_service
        self.queue_size = queue_size
        self.poll_interval = poll_interval
        self.stop_timeout = stop_timeout

        self._queue: asyncio.Queue[Registrant] = asyncio.Queue(maxsize=queue_size)
        self._running = False
        self._worker_task: asyncio.Task | None = None

        self._dispatched = 0
        self._dropped = 0
        self._sent = 0
        self._failed = 0

    @property
    def enabled(self) -> bool:
        """Whether notifications are actually delivered."""
        return self.email_service is not None

    def dispatch(self, registrant: Registrant) -> bool:
        """Queue the links email for a verified registrant.

        Returns:
            True if queued, False if disabled or dropped
        """
        if not self.enabled:
            return False

        try:
            self._queue.put_nowait(registrant)
            self._dispatched += 1
            return True
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                "notification_queue_full",
                order_id=registrant.order_id,
                queue_size=self.queue_size,
                dropped_total=self._dropped,
            )
            return False

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def start(self) -> None:
        """Start the background worker."""
        if self._running:
            return

        self._running = True
        self._worker_task = asyncio.create_task(self._worker_loop())
        logger.info(
            "notification_dispatcher_started",
            enabled=self.enabled,
            queue_size=self.queue_size,
        )

    async def stop(self) -> None:
        """Stop the worker and deliver whatever is still queued."""
        if not self._running:
            return

        self._running = False

        if self._worker_task:
            try:
                await asyncio.wait_for(self._worker_task, timeout=self.stop_timeout)
            except TimeoutError:
                logger.warning("notification_worker_stop_timeout")
                self._worker_task.cancel()
            except asyncio.CancelledError:
                pass

        await self._drain()

        logger.info(
            "notification_dispatcher_stopped",
            dispatched=self._dispatched,
            sent=self._sent,
            failed=self._failed,
            dropped=self._dropped,
        )

    async def _worker_loop(self) -> None:
        while self._running:
            try:
                registrant = await asyncio.wait_for(
                    self._queue.get(), timeout=self.poll_interval
                )
            except TimeoutError:
                continue

            await self._deliver(registrant)

    async def _drain(self) -> None:
        remaining: list[Registrant] = []
        while not self._queue.empty():
            try:
                remaining.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break

        if remaining:
            logger.info("notification_draining_remaining", count=len(remaining))
        for registrant in remaining:
            await self._deliver(registrant)

    async def _deliver(self, registrant: Registrant) -> None:
        """Send one notification. Never raises."""
        if self.email_service is None:
            return

        try:
            response = await self.email_service.send_workshop_links(registrant)
        except Exception as e:
            self._failed += 1
            logger.exception(
                "notification_send_error",
                order_id=registrant.order_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if response.success:
            self._sent += 1
        else:
            self._failed += 1
            logger.warning(
                "notification_send_failed",
                order_id=registrant.order_id,
                error=response.error,
            )

    # ==========================================================================
    # Status/Monitoring
    # ==========================================================================

    @property
    def is_running(self) -> bool:
        """Check if worker is running."""
        return self._running

    @property
    def queue_length(self) -> int:
        """Get current queue length."""
        return self._queue.qsize()

    def get_stats(self) -> dict:
        """Get dispatcher statistics for monitoring."""
        return {
            "enabled": self.enabled,
            "running": self._running,
            "queue_size": self.queue_size,
            "queue_length": self._queue.qsize(),
            "dispatched": self._dispatched,
            "sent": self._sent,
            "failed": self._failed,
            "dropped": self._dropped,
        }
