"""
Page Models for Page Builder
=============================

Models for pages, sections, placed elements and their per-breakpoint layouts.

Placements are percentage rects (0-100) relative to the containing section:
x/w against the section width at the active breakpoint, y/h against the
section height. Grid placements are a derived view and are never persisted.
"""

from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_SECTION_HEIGHT = 100


class Breakpoint(str, Enum):
    """Viewport width buckets."""
    DESKTOP = "desktop"
    TABLET = "tablet"
    MOBILE = "mobile"


class ZDirection(str, Enum):
    """Direction for z-index reordering."""
    UP = "up"
    DOWN = "down"


class DocumentModel(BaseModel):
    """Base for persisted document models: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class LayoutRect(DocumentModel):
    """Percentage rect (0-100) relative to the containing section."""
    x: float = 0
    y: float = 0
    w: float = 0
    h: float = 0

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


class ResponsiveRect(DocumentModel):
    """Cached percent projection of the desktop rect, used for live rendering."""
    left: float
    top: float
    width: float
    height: float


class GridPlacement(DocumentModel):
    """Zero-based, end-exclusive grid cell placement (derived view)."""
    column_start: int
    column_end: int
    row_start: int
    row_end: int

    @property
    def col_span(self) -> int:
        return self.column_end - self.column_start

    @property
    def row_span(self) -> int:
        return self.row_end - self.row_start


class ElementLayout(DocumentModel):
    """One rect per breakpoint. Desktop is always present."""
    desktop: LayoutRect
    tablet: Optional[LayoutRect] = None
    mobile: Optional[LayoutRect] = None
    responsive: Optional[ResponsiveRect] = None

    def get(self, breakpoint: Breakpoint) -> Optional[LayoutRect]:
        """Stored rect for a breakpoint, or None when absent."""
        return getattr(self, Breakpoint(breakpoint).value)


class PageElement(DocumentModel):
    """An element placed in a section."""
    id: str
    type: str
    content: Dict[str, Any] = Field(default_factory=dict)
    layout: ElementLayout
    z_index: int = 0
    section_id: Optional[str] = None
    snap_to_grid: bool = True
    # width / height, e.g. 16/9
    aspect_ratio: Optional[float] = Field(default=None, gt=0)
    external_id: Optional[str] = None


class Section(DocumentModel):
    """A vertically stacked region of the page."""
    id: str
    full_width: bool = False
    height: float = 600
    width: Optional[float] = None
    max_width: Optional[float] = None

    @field_validator("height")
    @classmethod
    def _clamp_height(cls, value: float) -> float:
        return max(MIN_SECTION_HEIGHT, value)


class PageData(DocumentModel):
    """A page document: the persisted unit handed to and from storage."""
    page_id: str
    elements: List[PageElement] = Field(default_factory=list)
    sections: List[Section] = Field(default_factory=list)

    @field_validator("elements", "sections", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_legacy(self) -> bool:
        """True for documents saved before sections existed."""
        return not self.sections

    def get_element(self, element_id: str) -> Optional[PageElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def get_section(self, section_id: Optional[str]) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def to_storage(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict in wire (camelCase) form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HistorySnapshot(DocumentModel):
    """A persisted history entry."""
    data: PageData
    timestamp: float
    version: Optional[int] = None


class PixelRect(NamedTuple):
    """Pixel rect relative to a container. Not persisted."""
    x: float
    y: float
    w: float
    h: float


class MarqueeBox(NamedTuple):
    """Rubber-band selection box in container pixels. Corners in any order."""
    start_x: float
    start_y: float
    end_x: float
    end_y: float


class GridRange(NamedTuple):
    """Cell range covered by a marquee box; min inclusive, max exclusive."""
    min_col: int
    max_col: int
    min_row: int
    max_row: int


def documents_equal(a: Optional[PageData], b: Optional[PageData]) -> bool:
    """Structural equality of two documents, independent of key order."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    return a.to_storage() == b.to_storage()
