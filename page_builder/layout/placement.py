"""
Placement Engine
================

Produces and validates element placements:
- breakpoint fallback to desktop
- first-fit placement suggestions (grid cells and percent rects)
- clamping of moves and resizes, including aspect-ratio constraints
- group moves that broadcast the primary element's clamped delta
- per-section marquee selection
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models.page_models import (
    Breakpoint, GridPlacement, LayoutRect, MarqueeBox, PageElement
)
from .grid_math import (
    centered_offset,
    marquee_to_grid_range,
    placement_overlaps_range,
    rect_to_grid_placement,
    section_row_count,
    snap_centered,
    snap_size,
)

logger = logging.getLogger(__name__)

MAX_PLACEMENT_ATTEMPTS = 100
MIN_SIZE_PERCENT = 1.0


def ensure_breakpoint_layout(element: PageElement, breakpoint: Breakpoint = Breakpoint.DESKTOP) -> LayoutRect:
    """
    Rect for a breakpoint, falling back to desktop.

    Percent rects are breakpoint-independent, so the fallback is the
    identity scaling of the desktop rect.
    """
    return element.layout.get(breakpoint) or element.layout.desktop


def rects_overlap(a: LayoutRect, b: LayoutRect) -> bool:
    """Half-open overlap: touching edges do not overlap."""
    return a.x < b.right and b.x < a.right and a.y < b.bottom and b.y < a.bottom


def _cells_overlap(a: GridPlacement, b: GridPlacement) -> bool:
    return (
        a.column_start < b.column_end and b.column_start < a.column_end
        and a.row_start < b.row_end and b.row_start < a.row_end
    )


def find_next_placement(
    grid_columns: int,
    row_count: int,
    col_span: int,
    row_span: int,
    existing: Sequence[GridPlacement]
) -> GridPlacement:
    """
    First-fit grid placement, scanning row-major from the top left.

    Returns the first origin where the span fits the grid without
    overlapping an existing placement. When every origin overlaps, the top
    left origin is returned and the new element is stacked.
    """
    col_span = max(1, min(col_span, grid_columns))
    row_span = max(1, min(row_span, row_count))

    def at(col: int, row: int) -> GridPlacement:
        return GridPlacement(
            column_start=col,
            column_end=col + col_span,
            row_start=row,
            row_end=row + row_span,
        )

    for row in range(row_count - row_span + 1):
        for col in range(grid_columns - col_span + 1):
            candidate = at(col, row)
            if not any(_cells_overlap(candidate, other) for other in existing):
                return candidate
    return at(0, 0)


def find_non_overlapping_rect(
    width: float,
    height: float,
    existing: Sequence[LayoutRect],
    *,
    step_x: float,
    step_y: float
) -> LayoutRect:
    """
    Percent-rect first fit.

    Starts one cell in from the centered grid origin and sweeps left to
    right, top to bottom in grid steps. Gives up after
    MAX_PLACEMENT_ATTEMPTS and keeps the last candidate tried.
    """
    offset_x = centered_offset(100, step_x)
    offset_y = centered_offset(100, step_y)
    x = offset_x + step_x
    y = offset_y + step_y

    for _ in range(MAX_PLACEMENT_ATTEMPTS):
        candidate = LayoutRect(x=x, y=y, w=width, h=height)
        if not any(rects_overlap(candidate, rect) for rect in existing):
            break
        x += step_x
        if x + width > 100 - offset_x:
            x = offset_x + step_x
            y += step_y
    else:
        logger.debug("[PLACEMENT] No free slot found, stacking on last candidate")

    return clamp_position(
        LayoutRect(
            x=snap_centered(x, step_x, 100),
            y=snap_centered(y, step_y, 100),
            w=width,
            h=height,
        ),
        offset_x=offset_x,
        offset_y=offset_y,
    )


def clamp_position(rect: LayoutRect, offset_x: float = 0, offset_y: float = 0) -> LayoutRect:
    """Clamp the origin into [offset, 100 - size - offset] on both axes."""
    x = max(offset_x, min(rect.x, max(offset_x, 100 - rect.w - offset_x)))
    y = max(offset_y, min(rect.y, max(offset_y, 100 - rect.h - offset_y)))
    if x == rect.x and y == rect.y:
        return rect
    return rect.model_copy(update={"x": x, "y": y})


def validate_placement(
    rect: LayoutRect,
    *,
    step_x: float = 0,
    step_y: float = 0,
    snap_to_grid: bool = True,
    aspect_ratio: Optional[float] = None,
    container_width: float = 0,
    container_height: float = 0
) -> LayoutRect:
    """
    Clamp a proposed rect into a committable one. Never rejects.

    Sizes are floored at one grid step (or MIN_SIZE_PERCENT) and capped at
    the container. With an aspect ratio, height follows width; width shrinks
    when the derived height cannot fit.
    """
    snapping = snap_to_grid and step_x > 0 and step_y > 0
    min_w = step_x if snapping else MIN_SIZE_PERCENT
    min_h = step_y if snapping else MIN_SIZE_PERCENT

    w = max(min_w, min(rect.w, 100))
    h = max(min_h, min(rect.h, 100))
    if snapping:
        w = min(snap_size(w, step_x), 100)
        h = min(snap_size(h, step_y), 100)

    if aspect_ratio and container_width > 0 and container_height > 0:
        # percent of width -> px -> percent of height
        h = (w / 100 * container_width / aspect_ratio) / container_height * 100
        if h > 100:
            h = 100
            w = (container_height * aspect_ratio) / container_width * 100
        w = max(min_w, min(w, 100))
        h = max(min_h, h)

    if snapping:
        offset_x = centered_offset(100, step_x)
        offset_y = centered_offset(100, step_y)
        x = snap_centered(rect.x, step_x, 100)
        y = snap_centered(rect.y, step_y, 100)
    else:
        offset_x = offset_y = 0
        x, y = rect.x, rect.y

    return clamp_position(LayoutRect(x=x, y=y, w=w, h=h), offset_x=offset_x, offset_y=offset_y)


def validate_position(
    rect: LayoutRect,
    *,
    step_x: float = 0,
    step_y: float = 0,
    snap_to_grid: bool = True
) -> LayoutRect:
    """Snap and clamp the origin of a rect. Width and height are kept as they are."""
    if snap_to_grid and step_x > 0 and step_y > 0:
        offset_x = centered_offset(100, step_x)
        offset_y = centered_offset(100, step_y)
        rect = rect.model_copy(update={
            "x": snap_centered(rect.x, step_x, 100),
            "y": snap_centered(rect.y, step_y, 100),
        })
        return clamp_position(rect, offset_x=offset_x, offset_y=offset_y)
    return clamp_position(rect)


def move_group(
    primary: PageElement,
    proposed: LayoutRect,
    others: Iterable[PageElement],
    *,
    breakpoint: Breakpoint = Breakpoint.DESKTOP,
    step_x: float = 0,
    step_y: float = 0
) -> List[Tuple[str, LayoutRect]]:
    """
    Move a selection as a group.

    Only positions change. The primary's proposed origin is snapped and
    clamped with its current size; its clamped delta (not the raw pointer
    delta) is applied to every other element, each clamped independently
    to the container.
    """
    original = ensure_breakpoint_layout(primary, breakpoint)
    committed = validate_position(
        proposed.model_copy(update={"w": original.w, "h": original.h}),
        step_x=step_x,
        step_y=step_y,
        snap_to_grid=primary.snap_to_grid,
    )
    dx = committed.x - original.x
    dy = committed.y - original.y

    updates = [(primary.id, committed)]
    for other in others:
        if other.id == primary.id:
            continue
        rect = ensure_breakpoint_layout(other, breakpoint)
        moved = rect.model_copy(update={"x": rect.x + dx, "y": rect.y + dy})
        updates.append((other.id, clamp_position(moved)))
    return updates


def marquee_select(
    elements: Iterable[PageElement],
    box: MarqueeBox,
    *,
    section_id: Optional[str],
    container_width: float,
    container_height: float,
    grid_columns: int,
    grid_row_height: float,
    breakpoint: Breakpoint = Breakpoint.DESKTOP
) -> List[str]:
    """Ids of the elements of one section whose cells intersect the marquee box."""
    grid_range = marquee_to_grid_range(
        box, container_width, container_height, grid_columns, grid_row_height
    )
    row_count = section_row_count(container_height, grid_row_height)
    selected = []
    for element in elements:
        if element.section_id != section_id:
            continue
        placement = rect_to_grid_placement(
            ensure_breakpoint_layout(element, breakpoint), grid_columns, row_count
        )
        if placement_overlaps_range(placement, grid_range):
            selected.append(element.id)
    return selected
