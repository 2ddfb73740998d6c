import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AcceptanceScheduler:
    """Cancellable delayed tasks keyed by ride id, run on the asyncio event loop.

    Used to simulate driver matching latency: a booking schedules an
    auto-accept, and any other way of leaving the requested state cancels it.
    ``schedule`` must be called from the event loop thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(self, ride_id: str, delay: float, callback: Callable[[str], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.cancel(ride_id)
        self._handles[ride_id] = loop.call_later(delay, self._fire, ride_id, callback)
        logger.debug("Scheduled auto-accept for %s in %.2fs", ride_id, delay)

    def _fire(self, ride_id: str, callback: Callable[[str], None]) -> None:
        self._handles.pop(ride_id, None)
        try:
            callback(ride_id)
        except Exception:
            logger.exception("Scheduled task for ride %s failed", ride_id)

    def cancel(self, ride_id: str) -> bool:
        handle = self._handles.pop(ride_id, None)
        if handle is None:
            return False
        handle.cancel()
        logger.debug("Cancelled scheduled task for %s", ride_id)
        return True

    def pending(self, ride_id: str) -> bool:
        return ride_id in self._handles

    def cancel_all(self) -> int:
        count = 0
        for ride_id in list(self._handles):
            if self.cancel(ride_id):
                count += 1
        return count
