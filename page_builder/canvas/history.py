"""
History Manager
===============

Undo/redo over page documents with optional, debounced, best-effort
persistence through the storage adapter.
"""

import logging
import time
from typing import Any, List, Optional

from ..models.page_models import HistorySnapshot, PageData
from ..services.storage import maybe_await
from .debounce import Debouncer

logger = logging.getLogger(__name__)


class HistoryManager:
    """Past/present/future stacks bounded by max_history_size."""

    def __init__(
        self,
        initial: PageData,
        max_history_size: int = 50,
        storage: Optional[Any] = None,
        page_id: Optional[str] = None,
        persist: bool = False,
        persist_delay: float = 0.25
    ):
        self.max_history_size = max_history_size
        self.storage = storage
        self.page_id = page_id
        self.persist = persist
        self.past: List[PageData] = []
        self.present: PageData = initial
        self.future: List[PageData] = []
        self.is_loading = False
        self._persister = Debouncer(persist_delay, self._persist_now, name=f"history:{page_id}")

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def _storage_supports(self, method: str) -> bool:
        return (
            self.persist
            and self.page_id is not None
            and callable(getattr(self.storage, method, None))
        )

    async def load(self) -> bool:
        """Seed the stacks from persisted snapshots. Returns True when history was restored."""
        if not self._storage_supports("load_history"):
            return False
        self.is_loading = True
        try:
            snapshots = await maybe_await(self.storage.load_history(self.page_id))
            if not snapshots:
                return False
            self.past = [s.data for s in snapshots[:-1]][-self.max_history_size:]
            self.present = snapshots[-1].data
            self.future = []
            logger.info(f"[HISTORY] Restored {len(snapshots)} snapshots for page {self.page_id}")
            return True
        except Exception as e:
            logger.error(f"[HISTORY] Failed to load history for page {self.page_id}: {e}")
            return False
        finally:
            self.is_loading = False

    def update_history(self, new_present: PageData, add_to_history: bool = True) -> None:
        """Record a new present. With add_to_history=False only the present is replaced."""
        if not add_to_history:
            self.present = new_present
            return
        self.past.append(self.present)
        if len(self.past) > self.max_history_size:
            del self.past[:len(self.past) - self.max_history_size]
        self.present = new_present
        self.future = []
        self._schedule_persist()

    def undo(self) -> Optional[PageData]:
        if not self.past:
            return None
        self.future.insert(0, self.present)
        self.present = self.past.pop()
        self._schedule_persist()
        return self.present

    def redo(self) -> Optional[PageData]:
        if not self.future:
            return None
        self.past.append(self.present)
        self.present = self.future.pop(0)
        self._schedule_persist()
        return self.present

    async def clear_history(self) -> None:
        """Drop past and future, keeping the present."""
        self.past = []
        self.future = []
        self._persister.cancel()
        if not self._storage_supports("clear_history"):
            return
        try:
            await maybe_await(self.storage.clear_history(self.page_id))
        except Exception as e:
            logger.error(f"[HISTORY] Failed to clear history for page {self.page_id}: {e}")

    def snapshots(self) -> List[HistorySnapshot]:
        """Most recent past entries plus the present, oldest first."""
        now = time.time()
        entries = [*self.past, self.present][-self.max_history_size:]
        return [HistorySnapshot(data=data, timestamp=now) for data in entries]

    def _schedule_persist(self) -> None:
        if self._storage_supports("save_history"):
            self._persister.schedule()

    async def _persist_now(self) -> None:
        # Reads the stacks at fire time, not at schedule time
        try:
            await maybe_await(self.storage.save_history(self.page_id, self.snapshots()))
            logger.debug(f"[HISTORY] Persisted history for page {self.page_id}")
        except Exception as e:
            logger.error(f"[HISTORY] Failed to persist history for page {self.page_id}: {e}")

    async def flush(self) -> None:
        await self._persister.flush()

    async def close(self) -> None:
        """Cancel pending persistence. An in-flight write is left to finish."""
        self._persister.cancel()
