"""
Page Data Manager
=================

Owns the canonical in-memory page document: loading, optimistic saves,
debounced auto-save, and dirty tracking against the last saved baseline.
"""

import logging
from typing import Any, Callable, Optional, Union

from ..models.config_models import PageBuilderConfig
from ..models.page_models import PageData, documents_equal
from ..layout.sections import ensure_responsive, normalize_page_data
from ..services.storage import maybe_await, parse_page
from .debounce import Debouncer
from .observers import CallbackRef

logger = logging.getLogger(__name__)

# Origins passed to on_change
ORIGIN_EDIT = "edit"
ORIGIN_HISTORY = "history"
ORIGIN_SYNC = "sync"

PageUpdate = Union[PageData, Callable[[PageData], PageData]]


class PageDataManager:
    """Canonical page document with optimistic persistence."""

    def __init__(
        self,
        page_id: str,
        storage: Any,
        config: Optional[PageBuilderConfig] = None,
        initial_data: Optional[PageData] = None,
        on_save: Optional[Callable[[PageData], None]] = None,
        on_saved: Optional[Callable[[PageData], None]] = None,
        on_change: Optional[Callable[[PageData, str], None]] = None,
        on_dirty_change: Optional[Callable[[bool], None]] = None
    ):
        self.page_id = page_id
        self.storage = storage
        self.config = config or PageBuilderConfig()
        self._initial_data = initial_data
        self.on_save = CallbackRef(on_save, name="on_save")
        self.on_saved = CallbackRef(on_saved, name="on_saved")
        self.on_change = CallbackRef(on_change, name="on_change")
        self.on_dirty_change = CallbackRef(on_dirty_change, name="on_dirty_change")

        self._page_data = self.normalize(initial_data or PageData(page_id=page_id))
        self._baseline: Optional[PageData] = None
        self._dirty = False
        self._auto_saver = Debouncer(
            self.config.auto_save_delay, self._auto_save, name=f"auto-save:{page_id}"
        )

    @property
    def page_data(self) -> PageData:
        return self._page_data

    @property
    def baseline(self) -> Optional[PageData]:
        return self._baseline

    @property
    def is_dirty(self) -> bool:
        return self._baseline is not None and not documents_equal(self._page_data, self._baseline)

    @property
    def auto_save_enabled(self) -> bool:
        return self.config.auto_save_delay > 0

    def normalize(self, data: PageData) -> PageData:
        """Sections and responsive caches, as applied at every load/save boundary."""
        return ensure_responsive(normalize_page_data(data, self.config.default_section_height))

    async def load(self) -> PageData:
        """Adopt the initial data override, or load from storage."""
        if self._initial_data is not None:
            # Already normalized in __init__
            self._set_baseline(self._page_data)
            return self._page_data

        try:
            loaded = parse_page(await maybe_await(self.storage.load(self.page_id)))
        except Exception as e:
            logger.error(f"[PAGE-DATA] Failed to load page {self.page_id}: {e}")
            loaded = None

        if loaded is not None:
            self._adopt(self.normalize(loaded), ORIGIN_SYNC)
            logger.info(f"[PAGE-DATA] Loaded page {self.page_id} ({len(loaded.elements)} elements)")
        self._set_baseline(self._page_data)
        return self._page_data

    def set_page_data(self, update: PageUpdate, origin: str = ORIGIN_EDIT) -> PageData:
        """Replace the document (or apply an updater to it) and re-arm auto-save."""
        data = update(self._page_data) if callable(update) else update
        if data is self._page_data:
            return data
        self._adopt(data, origin)
        if self.auto_save_enabled:
            self._auto_saver.schedule()
        return data

    async def save(self, data: Optional[PageData] = None) -> bool:
        """
        Optimistic save.

        on_save fires before the storage call. A document returned by storage
        is normalized and becomes the baseline; it replaces the local
        document unless a newer local edit happened meanwhile. Failures are
        logged and leave the local document untouched.
        """
        to_save = data if data is not None else self._page_data
        self.on_save(to_save)

        try:
            raw = await maybe_await(self.storage.save(self.page_id, to_save))
            result = parse_page(raw)
        except Exception as e:
            logger.error(f"[PAGE-DATA] Failed to save page {self.page_id}: {e}")
            return False

        confirmed = self.normalize(result) if result is not None else to_save
        if result is not None and self._page_data is to_save and not documents_equal(confirmed, to_save):
            self._adopt(confirmed, ORIGIN_SYNC)
        self._set_baseline(confirmed)
        self.on_saved(confirmed)
        logger.debug(f"[PAGE-DATA] Saved page {self.page_id}")
        return True

    async def _auto_save(self) -> None:
        if not self.is_dirty:
            return
        await self.save()

    async def flush(self) -> None:
        """Run a pending auto-save now."""
        await self._auto_saver.flush()

    async def close(self) -> None:
        """Cancel the pending auto-save. An in-flight save is left to finish."""
        self._auto_saver.cancel()

    def _adopt(self, data: PageData, origin: str) -> None:
        self._page_data = data
        self.on_change(data, origin)
        self._refresh_dirty()

    def _set_baseline(self, data: PageData) -> None:
        self._baseline = data
        self._refresh_dirty()

    def _refresh_dirty(self) -> None:
        dirty = self.is_dirty
        if dirty != self._dirty:
            self._dirty = dirty
            self.on_dirty_change(dirty)
