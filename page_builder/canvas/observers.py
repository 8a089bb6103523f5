"""
Observer Callbacks
==================

Single-slot callback holders. Coordinators keep a CallbackRef and call
through it, so a callback replaced later is the one that runs, even from a
timer armed before the replacement.
"""

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CallbackRef:
    """Mutable box around an optional observer callback."""

    def __init__(self, callback: Optional[Callable[..., Any]] = None, name: str = "callback"):
        self.current = callback
        self.name = name

    def set(self, callback: Optional[Callable[..., Any]]) -> None:
        self.current = callback

    def __call__(self, *args: Any) -> None:
        callback = self.current
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"[OBSERVER] {self.name} raised: {e}")
