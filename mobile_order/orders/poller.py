"""Periodic and visibility-triggered order status refresh"""

import asyncio
from typing import Optional

import structlog

from mobile_order.config import settings
from mobile_order.orders.history import OrderHistoryTracker

logger = structlog.get_logger()


class StatusPoller:
    """Drives `OrderHistoryTracker.refresh` on a timer and on foreground events"""

    def __init__(self, tracker: OrderHistoryTracker, interval: Optional[float] = None):
        self.tracker = tracker
        self.interval = interval or settings.order_poll_interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.ensure_future(self._run())
        logger.info("Order status polling started", interval=self.interval)

    async def stop(self) -> None:
        """Cancel the timer; an in-flight refresh is left to finish on its own"""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Order status polling stopped")

    async def on_visibility_change(self, visible: bool) -> None:
        """Refresh immediately when the app returns to the foreground"""
        if visible:
            await self._refresh_once()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self._refresh_once()

    async def _refresh_once(self) -> None:
        try:
            await self.tracker.refresh()
        except asyncio.CancelledError:
            raise
        except Exception:
            # One failed round must not end polling
            logger.exception("Order status refresh failed")
