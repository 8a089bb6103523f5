"""
Grid Math
=========

Pure coordinate helpers: pixel <-> percent conversions, grid snapping with a
centered grid, and the grid-cell view used for marquee hit-testing.
"""

import math
from typing import Dict

from ..models.page_models import (
    Breakpoint, GridPlacement, GridRange, LayoutRect, MarqueeBox, PixelRect, ResponsiveRect
)

# Decimal places kept before flooring/ceiling into cells (float noise guard)
_CELL_PRECISION = 6


def get_canvas_width(breakpoint: Breakpoint, breakpoints: Dict[Breakpoint, int]) -> int:
    return breakpoints[Breakpoint(breakpoint)]


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


# --- Pixel <-> percent ---

def to_percent_rect(rect: PixelRect, width: float, height: float) -> LayoutRect:
    """Pixel rect -> percent rect of a container."""
    return LayoutRect(
        x=(rect.x / width) * 100 if width else 0,
        y=(rect.y / height) * 100 if height else 0,
        w=(rect.w / width) * 100 if width else 0,
        h=(rect.h / height) * 100 if height else 0,
    )


def from_percent_rect(rect: LayoutRect, width: float, height: float) -> PixelRect:
    """Percent rect -> pixel rect of a container."""
    return PixelRect(
        x=(rect.x / 100) * width,
        y=(rect.y / 100) * height,
        w=(rect.w / 100) * width,
        h=(rect.h / 100) * height,
    )


def to_responsive(rect: LayoutRect) -> ResponsiveRect:
    """Percent rect -> responsive rect (same units)."""
    return ResponsiveRect(left=rect.x, top=rect.y, width=rect.w, height=rect.h)


def responsive_to_pixels(rect: ResponsiveRect, width: float, height: float) -> PixelRect:
    return PixelRect(
        x=(rect.left / 100) * width,
        y=(rect.top / 100) * height,
        w=(rect.width / 100) * width,
        h=(rect.height / 100) * height,
    )


def grid_cell_size(grid_size: float, container: float) -> float:
    """Size of one grid cell as a percent of the container."""
    return (grid_size / container) * 100 if container else 0


# --- Snapping ---

def snap(value: float, step: float) -> float:
    """Round to the nearest multiple of step."""
    if step <= 0:
        return value
    return _round_half_up(value / step) * step


def snap_size(value: float, step: float) -> float:
    """Snap a size; sizes never snap to zero."""
    if step <= 0:
        return value
    return max(step, snap(value, step))


def centered_offset(container: float, step: float) -> float:
    """Half of the slack left when the grid does not divide the container."""
    if step <= 0:
        return 0
    remainder = container % step
    # 100 % (100 / 24) lands a hair below one step in floating point
    if math.isclose(remainder, step, abs_tol=1e-9) or math.isclose(remainder, 0, abs_tol=1e-9):
        return 0
    return remainder / 2


def snap_centered(value: float, step: float, container: float) -> float:
    """Snap to a grid centered in the container, clamped to its bounds."""
    if step <= 0:
        return value
    offset = centered_offset(container, step)
    snapped = snap(value - offset, step) + offset
    return max(offset, min(snapped, container - offset))


# --- Grid cell view ---

def section_row_count(height: float, row_height: float) -> int:
    """Number of grid rows in a section."""
    if row_height <= 0:
        return 1
    return max(1, math.ceil(round(height / row_height, _CELL_PRECISION)))


def marquee_to_grid_range(
    box: MarqueeBox,
    container_width: float,
    container_height: float,
    grid_columns: int,
    grid_row_height: float
) -> GridRange:
    """Convert a marquee box in container pixels to a grid cell range."""
    left, right = sorted((box.start_x, box.end_x))
    top, bottom = sorted((box.start_y, box.end_y))
    col_width = container_width / grid_columns if grid_columns else 0
    row_count = section_row_count(container_height, grid_row_height)

    if col_width <= 0 or grid_row_height <= 0:
        return GridRange(0, 0, 0, 0)

    min_col = math.floor(round(left / col_width, _CELL_PRECISION))
    max_col = math.ceil(round(right / col_width, _CELL_PRECISION))
    min_row = math.floor(round(top / grid_row_height, _CELL_PRECISION))
    max_row = math.ceil(round(bottom / grid_row_height, _CELL_PRECISION))

    return GridRange(
        min_col=max(0, min(min_col, grid_columns)),
        max_col=max(0, min(max_col, grid_columns)),
        min_row=max(0, min(min_row, row_count)),
        max_row=max(0, min(max_row, row_count)),
    )


def placement_overlaps_range(placement: GridPlacement, grid_range: GridRange) -> bool:
    """Half-open overlap test on both axes."""
    return (
        placement.column_end > grid_range.min_col
        and placement.column_start < grid_range.max_col
        and placement.row_end > grid_range.min_row
        and placement.row_start < grid_range.max_row
    )


def rect_to_grid_placement(rect: LayoutRect, grid_columns: int, row_count: int) -> GridPlacement:
    """Cells covered by a percent rect. Spans are at least one cell."""
    col_start = math.floor(round(rect.x / 100 * grid_columns, _CELL_PRECISION))
    col_end = math.ceil(round(rect.right / 100 * grid_columns, _CELL_PRECISION))
    row_start = math.floor(round(rect.y / 100 * row_count, _CELL_PRECISION))
    row_end = math.ceil(round(rect.bottom / 100 * row_count, _CELL_PRECISION))

    col_start = max(0, min(col_start, grid_columns - 1))
    row_start = max(0, min(row_start, row_count - 1))
    return GridPlacement(
        column_start=col_start,
        column_end=max(col_start + 1, min(col_end, grid_columns)),
        row_start=row_start,
        row_end=max(row_start + 1, min(row_end, row_count)),
    )


def grid_placement_to_rect(placement: GridPlacement, grid_columns: int, row_count: int) -> LayoutRect:
    """Percent rect covering a grid placement."""
    return LayoutRect(
        x=placement.column_start / grid_columns * 100,
        y=placement.row_start / row_count * 100,
        w=placement.col_span / grid_columns * 100,
        h=placement.row_span / row_count * 100,
    )


# --- CSS ---

def grid_placement_to_css(placement: GridPlacement) -> Dict[str, str]:
    """1-based CSS grid-column / grid-row strings."""
    return {
        "gridColumn": f"{placement.column_start + 1} / {placement.column_end + 1}",
        "gridRow": f"{placement.row_start + 1} / {placement.row_end + 1}",
    }


def _pct(value: float) -> str:
    return f"{round(value, 4):g}%"


def rect_to_css(rect: LayoutRect) -> Dict[str, str]:
    """Absolute positioning declarations for a percent rect."""
    return {
        "left": _pct(rect.x),
        "top": _pct(rect.y),
        "width": _pct(rect.w),
        "height": _pct(rect.h),
    }
