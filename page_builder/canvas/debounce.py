"""
Debounce Timer
==============

asyncio debounce used by auto-save and history persistence. Re-arming
cancels the pending timer; cancel() guarantees a pending callback never
fires. A callback that already started runs to completion.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Run an async callback once, `delay` seconds after the last schedule()."""

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]], name: str = "debounce"):
        self.delay = delay
        self.name = name
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> bool:
        """(Re)arm the timer. Returns False when there is no running loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"[DEBOUNCE] {self.name}: no running event loop, not scheduled")
            return False
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire)
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run a pending callback now."""
        if self._handle is None:
            return
        self.cancel()
        await self._run()

    def _fire(self) -> None:
        self._handle = None
        self._task = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        try:
            await self._callback()
        except Exception as e:
            logger.error(f"[DEBOUNCE] {self.name} callback failed: {e}")
