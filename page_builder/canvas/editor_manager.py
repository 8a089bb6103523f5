"""
Editor Manager
==============

Keeps one open PageEditor per page id.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..models.config_models import PageBuilderConfig
from ..services.storage import maybe_await
from .editor import PageEditor

logger = logging.getLogger(__name__)


class EditorManager:
    """Manages editor instances for pages."""

    def __init__(self, storage: Any, config: Optional[PageBuilderConfig] = None):
        self.storage = storage
        self.config = config or PageBuilderConfig()
        self._editors: Dict[str, PageEditor] = {}
        self._opening: Dict[str, "asyncio.Future[PageEditor]"] = {}
        logger.info(f"[EDITOR-MANAGER] Initialized with storage={type(storage).__name__}")

    def get_open_editor(self, page_id: str) -> Optional[PageEditor]:
        return self._editors.get(page_id)

    async def get_editor(self, page_id: str) -> PageEditor:
        """Return the open editor for a page, opening it on first use."""
        editor = self._editors.get(page_id)
        if editor is not None:
            return editor
        # Concurrent callers share one open
        opening = self._opening.get(page_id)
        if opening is None:
            opening = asyncio.ensure_future(self._open(page_id))
            self._opening[page_id] = opening
            opening.add_done_callback(lambda _: self._opening.pop(page_id, None))
        return await asyncio.shield(opening)

    async def _open(self, page_id: str) -> PageEditor:
        editor = PageEditor(page_id, self.storage, self.config)
        await editor.open()
        self._editors[page_id] = editor
        return editor

    async def close_page(self, page_id: str, save: bool = True) -> bool:
        """Close a page's editor, saving unsaved changes first."""
        editor = self._editors.pop(page_id, None)
        if editor is None:
            return False
        if save and editor.is_dirty:
            await editor.save()
        await editor.close()
        return True

    async def delete_page(self, page_id: str) -> bool:
        """Close the editor without saving and delete the page from storage."""
        await self.close_page(page_id, save=False)
        delete = getattr(self.storage, "delete", None)
        if not callable(delete):
            logger.warning(f"[EDITOR-MANAGER] Storage cannot delete pages; {page_id} kept")
            return False
        try:
            await maybe_await(delete(page_id))
        except Exception as e:
            logger.error(f"[EDITOR-MANAGER] Failed to delete page {page_id}: {e}")
            return False
        return True

    async def close_all(self) -> None:
        for page_id in list(self._editors):
            await self.close_page(page_id)
        close = getattr(self.storage, "close", None)
        if callable(close):
            await maybe_await(close())
