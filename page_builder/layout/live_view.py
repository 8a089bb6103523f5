"""
Live View
=========

Projects a page document into positioned elements and a responsive
stylesheet. Elements are absolutely positioned inside their section by
percent rects; tablet and mobile overrides fall back to desktop.
"""

from typing import Any, Dict, List

from ..models.page_models import Breakpoint, PageData
from .grid_math import rect_to_css, to_responsive
from .placement import ensure_breakpoint_layout

# Mobile layouts kick in a little above the nominal mobile width
MOBILE_QUERY_FACTOR = 1.28


def _css_block(selector: str, declarations: Dict[str, Any]) -> str:
    body = " ".join(f"{key}: {value};" for key, value in declarations.items())
    return f"{selector} {{ {body} }}"


def live_elements(data: PageData, breakpoint: Breakpoint = Breakpoint.DESKTOP) -> List[Dict[str, Any]]:
    """Elements in paint order with their resolved rect and CSS for a breakpoint."""
    items = []
    for element in sorted(data.elements, key=lambda el: el.z_index):
        rect = ensure_breakpoint_layout(element, breakpoint)
        items.append({
            "id": element.id,
            "type": element.type,
            "section_id": element.section_id,
            "content": element.content,
            "z_index": element.z_index,
            "rect": rect.model_dump(),
            "css": rect_to_css(rect),
        })
    return items


def render_live_css(data: PageData, breakpoints: Dict[Breakpoint, int]) -> str:
    """Stylesheet for the live page with tablet and mobile media queries."""
    desktop_width = breakpoints[Breakpoint.DESKTOP]
    blocks = [
        _css_block(".page-container", {
            "position": "relative",
            "width": "100%",
            "max-width": f"{desktop_width}px",
            "margin": "0 auto",
        }),
        _css_block(".page-section", {"position": "relative", "width": "100%"}),
    ]

    for section in data.sections:
        declarations = {"height": f"{section.height:g}px"}
        if not section.full_width and section.width is not None:
            declarations["max-width"] = f"{section.width:g}px"
            declarations["margin"] = "0 auto"
        blocks.append(_css_block(f".section-{section.id}", declarations))

    tablet_rules = []
    mobile_rules = []
    for element in data.elements:
        selector = f".element-{element.id}"
        responsive = element.layout.responsive or to_responsive(element.layout.desktop)
        blocks.append(_css_block(selector, {
            "position": "absolute",
            "left": f"{responsive.left:g}%",
            "top": f"{responsive.top:g}%",
            "width": f"{responsive.width:g}%",
            "height": f"{responsive.height:g}%",
            "z-index": element.z_index,
            "box-sizing": "border-box",
        }))
        tablet_rules.append(_css_block(
            selector, rect_to_css(ensure_breakpoint_layout(element, Breakpoint.TABLET))
        ))
        mobile_rules.append(_css_block(
            selector, rect_to_css(ensure_breakpoint_layout(element, Breakpoint.MOBILE))
        ))

    if tablet_rules:
        blocks.append(
            f"@media (max-width: {breakpoints[Breakpoint.TABLET]}px) {{ " + " ".join(tablet_rules) + " }"
        )
    if mobile_rules:
        mobile_query = breakpoints[Breakpoint.MOBILE] * MOBILE_QUERY_FACTOR
        blocks.append(
            f"@media (max-width: {mobile_query:g}px) {{ " + " ".join(mobile_rules) + " }"
        )
    return "\n".join(blocks)
