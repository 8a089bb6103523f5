"""
Sections
========

Section model operations: legacy normalization, page height, and the
section transforms used by the action layer. Every function returns a new
document and leaves its input untouched.
"""

import logging
import uuid
from typing import Dict, List, Optional

from ..models.page_models import (
    Breakpoint, MIN_SECTION_HEIGHT, PageData, PageElement, Section
)
from .grid_math import get_canvas_width, to_responsive

logger = logging.getLogger(__name__)

MIN_SECTION_WIDTH = 100


def new_section_id() -> str:
    return f"sec-{uuid.uuid4().hex[:12]}"


def normalize_page_data(data: PageData, default_section_height: float) -> PageData:
    """
    Ensure the document is section-based.

    Legacy documents (no sections) get one content-width section and every
    element is assigned to it. In sectioned documents, elements without a
    valid section are moved to the first section. Idempotent.
    """
    if data.sections:
        section_ids = {s.id for s in data.sections}
        if all(el.section_id in section_ids for el in data.elements):
            return data
        first_id = data.sections[0].id
        logger.info(f"[SECTIONS] Re-parenting orphaned elements of page {data.page_id} to {first_id}")
        return data.model_copy(update={
            "elements": [
                el if el.section_id in section_ids else el.model_copy(update={"section_id": first_id})
                for el in data.elements
            ]
        })

    section = Section(id=new_section_id(), full_width=False, height=default_section_height)
    logger.info(f"[SECTIONS] Migrating legacy page {data.page_id} into section {section.id}")
    return data.model_copy(update={
        "sections": [section],
        "elements": [el.model_copy(update={"section_id": section.id}) for el in data.elements],
    })


def ensure_responsive(data: PageData) -> PageData:
    """Fill missing responsive caches from the desktop rect."""
    if all(el.layout.responsive is not None for el in data.elements):
        return data
    elements = []
    for el in data.elements:
        if el.layout.responsive is None:
            layout = el.layout.model_copy(update={"responsive": to_responsive(el.layout.desktop)})
            el = el.model_copy(update={"layout": layout})
        elements.append(el)
    return data.model_copy(update={"elements": elements})


def page_total_height(sections: Optional[List[Section]], default_single_section_height: float) -> float:
    """Total page height in px: sum of section heights, or the default when there are none."""
    if not sections:
        return default_single_section_height
    return sum(s.height for s in sections)


def section_elements(data: PageData, section_id: Optional[str]) -> List[PageElement]:
    return [el for el in data.elements if el.section_id == section_id]


def section_canvas_width(
    section: Optional[Section],
    breakpoint: Breakpoint,
    breakpoints: Dict[Breakpoint, int],
    max_section_width: float
) -> float:
    """Effective pixel width of a section at a breakpoint."""
    canvas_width = get_canvas_width(breakpoint, breakpoints)
    if section is None or section.full_width:
        return canvas_width
    width = section.width if section.width is not None else breakpoints[Breakpoint.DESKTOP]
    cap = section.max_width if section.max_width is not None else max_section_width
    return min(width, cap, canvas_width)


def add_section(
    data: PageData,
    full_width: bool = False,
    *,
    height: float,
    desktop_width: float,
    max_section_width: float
) -> PageData:
    """Append a section at the bottom of the page."""
    section = Section(
        id=new_section_id(),
        full_width=full_width,
        height=height,
        width=None if full_width else min(desktop_width, max_section_width),
    )
    return data.model_copy(update={"sections": [*data.sections, section]})


def delete_section(data: PageData, section_id: str) -> PageData:
    """Remove a section; its elements move to the first remaining section."""
    if data.get_section(section_id) is None:
        return data
    sections = [s for s in data.sections if s.id != section_id]
    fallback_id = sections[0].id if sections else None
    elements = [
        el.model_copy(update={"section_id": fallback_id}) if el.section_id == section_id else el
        for el in data.elements
    ]
    return data.model_copy(update={"sections": sections, "elements": elements})


def update_section_height(
    data: PageData,
    section_id: str,
    height: float,
    min_height: float = MIN_SECTION_HEIGHT
) -> PageData:
    """
    Resize a section vertically, clamped to min_height.

    Element rects are percentages of the section height, so contained
    elements keep their relative composition without being rewritten.
    """
    section = data.get_section(section_id)
    if section is None:
        return data
    clamped = max(min_height, height)
    if clamped == section.height:
        return data
    return _replace_section(data, section.model_copy(update={"height": clamped}))


def update_section_full_width(
    data: PageData,
    section_id: str,
    full_width: bool,
    desktop_width: float
) -> PageData:
    section = data.get_section(section_id)
    if section is None:
        return data
    update = {"full_width": full_width}
    if not full_width and section.width is None:
        update["width"] = desktop_width
    return _replace_section(data, section.model_copy(update=update))


def update_section_width(
    data: PageData,
    section_id: str,
    width: float,
    max_section_width: float
) -> PageData:
    """Set a content-width section's width, clamped to its max width."""
    section = data.get_section(section_id)
    if section is None:
        return data
    cap = section.max_width if section.max_width is not None else max_section_width
    clamped = max(MIN_SECTION_WIDTH, min(width, cap))
    return _replace_section(data, section.model_copy(update={"width": clamped}))


def _replace_section(data: PageData, section: Section) -> PageData:
    return data.model_copy(update={
        "sections": [section if s.id == section.id else s for s in data.sections]
    })
