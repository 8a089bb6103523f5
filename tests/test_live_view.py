"""
Tests for layout.live_view
"""
from page_builder.layout.live_view import live_elements, render_live_css
from page_builder.models.config_models import DEFAULT_BREAKPOINTS
from page_builder.models.page_models import (
    Breakpoint, ElementLayout, LayoutRect, PageData, PageElement, Section
)

from conftest import make_element


def test_live_elements_in_paint_order(page_with_elements):
    page = page_with_elements.model_copy(update={
        "elements": list(reversed(page_with_elements.elements))
    })
    items = live_elements(page)
    assert [item["id"] for item in items] == ["a", "b", "c"]
    assert items[0]["css"]["left"] == "10%"


def test_live_elements_fall_back_to_desktop():
    element = PageElement(
        id="e", type="text", section_id="s",
        layout=ElementLayout(desktop=LayoutRect(x=25, y=0, w=50, h=10)),
    )
    items = live_elements(PageData(page_id="p", elements=[element]), Breakpoint.MOBILE)
    assert items[0]["rect"] == {"x": 25, "y": 0, "w": 50, "h": 10}


def test_css_has_sections_and_media_queries():
    page = PageData(
        page_id="p",
        sections=[Section(id="top", height=400, width=1000), Section(id="hero", full_width=True)],
        elements=[make_element("a", 10, 20, w=30, h=40, section_id="top", z_index=3)],
    )
    css = render_live_css(page, DEFAULT_BREAKPOINTS)
    assert ".section-top { height: 400px; max-width: 1000px; margin: 0 auto; }" in css
    assert ".section-hero { height: 600px; }" in css
    assert "left: 10%;" in css and "z-index: 3;" in css
    assert "@media (max-width: 768px)" in css
    assert "@media (max-width: 480px)" in css


def test_css_without_elements_has_no_media_queries(empty_page):
    css = render_live_css(empty_page, DEFAULT_BREAKPOINTS)
    assert "@media" not in css
    assert ".page-container" in css
