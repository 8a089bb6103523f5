"""
Page Editor
===========

Editor instance for one page. Wires the page actions to the page data
manager and the history manager, and keeps the view state (breakpoint,
selection) the surrounding UI needs.

Data flow: action -> PageDataManager.set_page_data -> change detection ->
HistoryManager.update_history (unless replaying undo/redo) -> debounced
auto-save and history persistence.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..models.config_models import PageBuilderConfig
from ..models.page_models import (
    Breakpoint, LayoutRect, MarqueeBox, PageData, ZDirection, documents_equal
)
from ..layout.placement import ensure_breakpoint_layout, marquee_select, move_group, validate_placement
from ..layout.sections import page_total_height
from .history import HistoryManager
from .observers import CallbackRef
from .page_actions import PageActions
from .page_data import ORIGIN_EDIT, ORIGIN_HISTORY, ORIGIN_SYNC, PageDataManager

logger = logging.getLogger(__name__)


class PageEditor:
    """
    Headless page editor.

    Observers:
    - on_element_select(element_id or None)
    - on_element_update(element_id, LayoutRect)
    - on_dirty_change(bool)
    - on_save(PageData), fired optimistically before persistence
    """

    def __init__(
        self,
        page_id: str,
        storage: Any,
        config: Optional[PageBuilderConfig] = None,
        initial_data: Optional[PageData] = None,
        on_save: Optional[Callable[[PageData], None]] = None,
        on_element_select: Optional[Callable[[Optional[str]], None]] = None,
        on_element_update: Optional[Callable[[str, LayoutRect], None]] = None,
        on_dirty_change: Optional[Callable[[bool], None]] = None
    ):
        self.page_id = page_id
        self.config = config or PageBuilderConfig()
        self.actions = PageActions(self.config)
        self.on_element_select = CallbackRef(on_element_select, name="on_element_select")
        self.on_element_update = CallbackRef(on_element_update, name="on_element_update")

        self.breakpoint = Breakpoint.DESKTOP
        self.selected_ids: List[str] = []
        self.show_grid = True

        self.data = PageDataManager(
            page_id,
            storage,
            self.config,
            initial_data=initial_data,
            on_save=on_save,
            on_change=self._on_page_change,
            on_dirty_change=on_dirty_change,
        )
        self.history = HistoryManager(
            self.data.page_data,
            max_history_size=self.config.max_history_size,
            storage=storage,
            page_id=page_id,
            persist=self.config.persist_history,
            persist_delay=self.config.history_persist_delay,
        )
        self._last_recorded: PageData = self.data.page_data
        self._opened = False

    # --- Lifecycle ---

    async def open(self) -> "PageEditor":
        """Load the page, then seed history (from storage when persisted)."""
        if self._opened:
            return self
        await self.data.load()
        restored = await self.history.load()
        if restored:
            self.data.set_page_data(self.history.present, origin=ORIGIN_HISTORY)
        else:
            self.history.update_history(self.data.page_data, add_to_history=False)
        self._last_recorded = self.data.page_data
        self._opened = True
        logger.info(f"[EDITOR] Opened page {self.page_id}")
        return self

    async def close(self) -> None:
        """Cancel pending timers."""
        await self.data.close()
        await self.history.close()
        logger.info(f"[EDITOR] Closed page {self.page_id}")

    # --- State ---

    @property
    def page_data(self) -> PageData:
        return self.data.page_data

    @property
    def is_dirty(self) -> bool:
        return self.data.is_dirty

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def total_height(self) -> float:
        return page_total_height(self.page_data.sections, self.config.default_canvas_height)

    def set_breakpoint(self, breakpoint: Breakpoint) -> None:
        """Switch the active breakpoint. Selection is per view, so it is cleared."""
        breakpoint = Breakpoint(breakpoint)
        if breakpoint == self.breakpoint:
            return
        self.breakpoint = breakpoint
        if self.selected_ids:
            self.select_elements(None)

    def set_show_grid(self, show: bool) -> None:
        self.show_grid = bool(show)

    def select_elements(self, ids: Optional[Iterable[str]]) -> List[str]:
        known = {el.id for el in self.page_data.elements}
        self.selected_ids = list(dict.fromkeys(i for i in (ids or []) if i in known))
        self.on_element_select(self.selected_ids[0] if self.selected_ids else None)
        return self.selected_ids

    # --- Change detection ---

    def _on_page_change(self, data: PageData, origin: str) -> None:
        # Undo/redo replays are already in the stacks
        if origin == ORIGIN_HISTORY:
            self._last_recorded = data
            return
        if origin == ORIGIN_SYNC:
            self.history.update_history(data, add_to_history=False)
            self._last_recorded = data
            return
        if not documents_equal(self._last_recorded, data):
            self.history.update_history(data, add_to_history=True)
            self._last_recorded = data

    def _apply(self, fn: Callable[[PageData], PageData]) -> PageData:
        return self.data.set_page_data(fn, origin=ORIGIN_EDIT)

    # --- Element actions ---

    def add_element(
        self,
        element_type: str,
        content: Optional[Dict[str, Any]] = None,
        section_id: Optional[str] = None,
        external_id: Optional[str] = None
    ) -> Optional[str]:
        """Add an element and return its id (None when the section is unknown)."""
        before = self.page_data
        after = self._apply(lambda d: self.actions.add_element(d, element_type, content, section_id, external_id))
        if after is before:
            return None
        return after.elements[-1].id

    def update_element(self, element_id: str, **updates: Any) -> None:
        self._apply(lambda d: self.actions.update_element(d, element_id, **updates))

    def update_element_content(self, element_id: str, content: Dict[str, Any]) -> None:
        self._apply(lambda d: self.actions.update_element_content(d, element_id, content))

    def update_layout(self, element_id: str, rect: LayoutRect) -> None:
        """Commit a rect for the active breakpoint as-is."""
        self._apply(lambda d: self.actions.update_layout(d, element_id, self.breakpoint, rect))
        self.on_element_update(element_id, rect)

    def update_layout_bulk(self, updates: List[Tuple[str, LayoutRect]]) -> None:
        if not updates:
            return
        self._apply(lambda d: self.actions.update_layout_bulk(d, updates, self.breakpoint))
        for element_id, rect in updates:
            self.on_element_update(element_id, rect)

    def move_element(self, element_id: str, dx: float, dy: float) -> Optional[LayoutRect]:
        """
        Move by a percent delta. When the element belongs to a multi-selection,
        the whole selection in its section moves by the element's clamped delta.
        """
        element = self.page_data.get_element(element_id)
        if element is None:
            return None
        current = ensure_breakpoint_layout(element, self.breakpoint)
        proposed = current.model_copy(update={"x": current.x + dx, "y": current.y + dy})
        step_x, step_y, _, _ = self.actions.grid_steps(
            self.page_data, element.section_id, self.breakpoint
        )

        others = []
        if element_id in self.selected_ids and len(self.selected_ids) > 1:
            others = [
                el for el in self.page_data.elements
                if el.id in self.selected_ids and el.id != element_id and el.section_id == element.section_id
            ]
        updates = move_group(
            element,
            proposed,
            others,
            breakpoint=self.breakpoint,
            step_x=step_x,
            step_y=step_y,
        )
        self.update_layout_bulk(updates)
        return updates[0][1]

    def resize_element(
        self,
        element_id: str,
        w: float,
        h: float,
        x: Optional[float] = None,
        y: Optional[float] = None
    ) -> Optional[LayoutRect]:
        """Resize (and optionally reposition) an element; the result is clamped before commit."""
        element = self.page_data.get_element(element_id)
        if element is None:
            return None
        current = ensure_breakpoint_layout(element, self.breakpoint)
        step_x, step_y, width, height = self.actions.grid_steps(
            self.page_data, element.section_id, self.breakpoint
        )
        rect = validate_placement(
            LayoutRect(
                x=current.x if x is None else x,
                y=current.y if y is None else y,
                w=w,
                h=h,
            ),
            step_x=step_x,
            step_y=step_y,
            snap_to_grid=element.snap_to_grid,
            aspect_ratio=element.aspect_ratio,
            container_width=width,
            container_height=height,
        )
        self.update_layout(element_id, rect)
        return rect

    def delete_element(self, element_id: str) -> None:
        self._apply(lambda d: self.actions.delete_element(d, element_id))
        if element_id in self.selected_ids:
            self.selected_ids = [i for i in self.selected_ids if i != element_id]
            self.on_element_select(self.selected_ids[0] if self.selected_ids else None)

    def update_z_index(self, element_id: str, direction: ZDirection) -> None:
        self._apply(lambda d: self.actions.update_z_index(d, element_id, direction))

    def marquee_select(self, section_id: str, box: MarqueeBox) -> List[str]:
        """Select the elements of one section touched by a marquee box (section pixels)."""
        section = self.page_data.get_section(section_id)
        if section is None:
            return self.select_elements(None)
        _, _, width, height = self.actions.grid_steps(self.page_data, section_id, self.breakpoint)
        ids = marquee_select(
            self.page_data.elements,
            box,
            section_id=section_id,
            container_width=width,
            container_height=height,
            grid_columns=self.config.grid_columns,
            grid_row_height=self.config.grid_row_height,
            breakpoint=self.breakpoint,
        )
        return self.select_elements(ids)

    # --- Section actions ---

    def add_section(self, full_width: bool = False) -> str:
        data = self._apply(lambda d: self.actions.add_section(d, full_width))
        return data.sections[-1].id

    def delete_section(self, section_id: str) -> None:
        self._apply(lambda d: self.actions.delete_section(d, section_id))

    def update_section_height(self, section_id: str, height: float) -> None:
        self._apply(lambda d: self.actions.update_section_height(d, section_id, height))

    def update_section_full_width(self, section_id: str, full_width: bool) -> None:
        self._apply(lambda d: self.actions.update_section_full_width(d, section_id, full_width))

    def update_section_width(self, section_id: str, width: float) -> None:
        self._apply(lambda d: self.actions.update_section_width(d, section_id, width))

    # --- History and persistence ---

    def undo(self) -> bool:
        previous = self.history.undo()
        if previous is None:
            return False
        self._replay(previous)
        return True

    def redo(self) -> bool:
        following = self.history.redo()
        if following is None:
            return False
        self._replay(following)
        return True

    def _replay(self, data: PageData) -> None:
        self.data.set_page_data(data, origin=ORIGIN_HISTORY)
        self._last_recorded = data
        known = {el.id for el in data.elements}
        self.selected_ids = [i for i in self.selected_ids if i in known]

    async def save(self) -> bool:
        return await self.data.save()

    def snapshot(self) -> Dict[str, Any]:
        """Serializable editor state for API responses."""
        return {
            "page": self.page_data.to_storage(),
            "breakpoint": self.breakpoint.value,
            "selected_ids": list(self.selected_ids),
            "show_grid": self.show_grid,
            "is_dirty": self.is_dirty,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "total_height": self.total_height,
        }
