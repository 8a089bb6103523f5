"""
Page Actions
============

Document transforms for elements and sections. Each action takes a
PageData and returns a new PageData; unknown ids return the input
unchanged.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, Optional, Tuple

from ..models.config_models import PageBuilderConfig
from ..models.page_models import (
    Breakpoint, ElementLayout, LayoutRect, PageData, PageElement, ZDirection
)
from ..layout import sections as section_ops
from ..layout.grid_math import grid_cell_size, snap_size, to_responsive
from ..layout.placement import ensure_breakpoint_layout, find_non_overlapping_rect

logger = logging.getLogger(__name__)

# Default element size in px before conversion to percent
DEFAULT_ELEMENT_WIDTH = 200
DEFAULT_ELEMENT_HEIGHT = 100

_PROTECTED_FIELDS = {"id"}


def new_element_id() -> str:
    return f"el-{uuid.uuid4().hex[:12]}"


class PageActions:
    """Element and section actions bound to an editor configuration."""

    def __init__(self, config: Optional[PageBuilderConfig] = None):
        self.config = config or PageBuilderConfig()

    @property
    def desktop_width(self) -> int:
        return self.config.canvas_width(Breakpoint.DESKTOP)

    def grid_steps(self, data: PageData, section_id: Optional[str],
                   breakpoint: Breakpoint = Breakpoint.DESKTOP) -> Tuple[float, float, float, float]:
        """(step_x, step_y, container_width, container_height) for a section, in percent and px."""
        section = data.get_section(section_id)
        width = section_ops.section_canvas_width(
            section, breakpoint, self.config.breakpoints, self.config.max_section_width
        )
        height = section.height if section else self.config.default_canvas_height
        return (
            grid_cell_size(self.config.grid_size, width),
            grid_cell_size(self.config.grid_size, height),
            width,
            height,
        )

    # --- Elements ---

    def add_element(
        self,
        data: PageData,
        element_type: str,
        content: Optional[Dict[str, Any]] = None,
        section_id: Optional[str] = None,
        external_id: Optional[str] = None
    ) -> PageData:
        """Add an element at the first free slot of its section."""
        if data.is_legacy:
            data = section_ops.normalize_page_data(data, self.config.default_section_height)
        target_id = section_id if section_id is not None else (
            data.sections[0].id if data.sections else None
        )
        if section_id is not None and data.get_section(section_id) is None:
            logger.warning(f"[ACTIONS] add_element: unknown section {section_id}, ignoring")
            return data

        step_x, step_y, width, height = self.grid_steps(data, target_id)
        grid = self.config.grid_size
        w = snap_size(DEFAULT_ELEMENT_WIDTH, grid) / width * 100 if width else 0
        h = snap_size(DEFAULT_ELEMENT_HEIGHT, grid) / height * 100 if height else 0
        w, h = min(w, 100), min(h, 100)

        existing = [
            ensure_breakpoint_layout(el, Breakpoint.DESKTOP)
            for el in section_ops.section_elements(data, target_id)
        ]
        rect = find_non_overlapping_rect(w, h, existing, step_x=step_x, step_y=step_y)

        element = PageElement(
            id=new_element_id(),
            type=element_type,
            content=dict(content or {}),
            layout=ElementLayout(
                desktop=rect,
                tablet=rect,
                mobile=rect,
                responsive=to_responsive(rect),
            ),
            z_index=len(data.elements),
            section_id=target_id,
            external_id=external_id,
        )
        logger.debug(f"[ACTIONS] Added {element_type} element {element.id} to section {target_id}")
        return data.model_copy(update={"elements": [*data.elements, element]})

    def update_element(self, data: PageData, element_id: str, **updates: Any) -> PageData:
        """Shallow-update element fields (id is never changed)."""
        fields = {
            key: value for key, value in updates.items()
            if key in PageElement.model_fields and key not in _PROTECTED_FIELDS
        }
        if not fields or data.get_element(element_id) is None:
            return data
        # Re-validate so dict layouts and content arrive as models
        return self._map_element(
            data, element_id,
            lambda el: PageElement.model_validate({**dict(el), **fields}),
        )

    def update_element_content(self, data: PageData, element_id: str, content: Dict[str, Any]) -> PageData:
        return self.update_element(data, element_id, content=dict(content))

    def update_layout(
        self,
        data: PageData,
        element_id: str,
        breakpoint: Breakpoint,
        rect: LayoutRect
    ) -> PageData:
        """Replace one breakpoint's rect."""
        return self.update_layout_bulk(data, [(element_id, rect)], breakpoint)

    def update_layout_bulk(
        self,
        data: PageData,
        updates: Iterable[Tuple[str, LayoutRect]],
        breakpoint: Breakpoint
    ) -> PageData:
        """Replace one breakpoint's rect for several elements in a single pass."""
        by_id = dict(updates)
        if not by_id:
            return data
        breakpoint = Breakpoint(breakpoint)
        changed = False
        elements = []
        for el in data.elements:
            rect = by_id.get(el.id)
            if rect is None:
                elements.append(el)
                continue
            changed = True
            layout_update: Dict[str, Any] = {breakpoint.value: rect}
            if breakpoint == Breakpoint.DESKTOP:
                layout_update["responsive"] = to_responsive(rect)
            elif el.layout.responsive is None:
                layout_update["responsive"] = to_responsive(el.layout.desktop)
            elements.append(el.model_copy(update={"layout": el.layout.model_copy(update=layout_update)}))
        if not changed:
            return data
        return data.model_copy(update={"elements": elements})

    def update_z_index(self, data: PageData, element_id: str, direction: ZDirection) -> PageData:
        """
        Bring to front (max + 1) or send to back (min - 1).

        Values are never compacted, so reordering stays O(1).
        """
        if data.get_element(element_id) is None:
            return data
        z_values = [el.z_index for el in data.elements]
        if ZDirection(direction) == ZDirection.UP:
            z_index = max(z_values) + 1
        else:
            z_index = min(z_values) - 1
        return self._map_element(data, element_id, lambda el: el.model_copy(update={"z_index": z_index}))

    def delete_element(self, data: PageData, element_id: str) -> PageData:
        if data.get_element(element_id) is None:
            return data
        return data.model_copy(update={
            "elements": [el for el in data.elements if el.id != element_id]
        })

    # --- Sections ---

    def add_section(self, data: PageData, full_width: bool = False) -> PageData:
        return section_ops.add_section(
            data,
            full_width,
            height=self.config.default_section_height,
            desktop_width=self.desktop_width,
            max_section_width=self.config.max_section_width,
        )

    def delete_section(self, data: PageData, section_id: str) -> PageData:
        return section_ops.delete_section(data, section_id)

    def update_section_height(self, data: PageData, section_id: str, height: float) -> PageData:
        return section_ops.update_section_height(data, section_id, height)

    def update_section_full_width(self, data: PageData, section_id: str, full_width: bool) -> PageData:
        return section_ops.update_section_full_width(data, section_id, full_width, self.desktop_width)

    def update_section_width(self, data: PageData, section_id: str, width: float) -> PageData:
        return section_ops.update_section_width(data, section_id, width, self.config.max_section_width)

    @staticmethod
    def _map_element(data: PageData, element_id: str, fn) -> PageData:
        return data.model_copy(update={
            "elements": [fn(el) if el.id == element_id else el for el in data.elements]
        })
