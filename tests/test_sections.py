"""
Tests for layout.sections

Test Coverage:
- legacy normalization and idempotence
- page height
- section add / delete / resize / width mode
"""
from page_builder.layout import sections as section_ops
from page_builder.models.config_models import DEFAULT_BREAKPOINTS
from page_builder.models.page_models import Breakpoint, PageData, Section

from conftest import make_element


def legacy_page():
    return PageData(
        page_id="legacy",
        elements=[make_element("a", 0, 0, section_id=None), make_element("b", 50, 50, section_id=None)],
    )


def test_normalize_creates_single_section():
    normalized = section_ops.normalize_page_data(legacy_page(), 700)
    assert len(normalized.sections) == 1
    section = normalized.sections[0]
    assert section.height == 700
    assert section.full_width is False
    assert all(el.section_id == section.id for el in normalized.elements)


def test_normalize_is_idempotent():
    once = section_ops.normalize_page_data(legacy_page(), 600)
    twice = section_ops.normalize_page_data(once, 600)
    assert twice is once
    assert twice == once


def test_normalize_does_not_touch_input():
    page = legacy_page()
    section_ops.normalize_page_data(page, 600)
    assert page.sections == []
    assert page.elements[0].section_id is None


def test_normalize_reparents_dangling_elements(page_with_elements):
    page = page_with_elements.model_copy(update={
        "elements": [*page_with_elements.elements, make_element("d", 0, 0, section_id="gone")]
    })
    normalized = section_ops.normalize_page_data(page, 600)
    assert normalized.get_element("d").section_id == "sec-1"
    assert section_ops.normalize_page_data(normalized, 600) is normalized


def test_missing_sections_key_is_legacy():
    page = PageData.model_validate({"pageId": "p", "elements": [], "sections": None})
    assert page.is_legacy


def test_ensure_responsive_fills_cache():
    page = section_ops.ensure_responsive(legacy_page())
    responsive = page.get_element("b").layout.responsive
    assert (responsive.left, responsive.top, responsive.width, responsive.height) == (50, 50, 10, 10)
    assert section_ops.ensure_responsive(page) is page


def test_page_total_height():
    sections = [Section(id="a", height=600), Section(id="b", height=250)]
    assert section_ops.page_total_height(sections, 800) == 850
    assert section_ops.page_total_height([], 800) == 800
    assert section_ops.page_total_height(None, 800) == 800


def test_add_content_width_section_capped(empty_page):
    page = section_ops.add_section(empty_page, False, height=600, desktop_width=1200, max_section_width=960)
    added = page.sections[-1]
    assert added.width == 960
    assert added.full_width is False
    assert len(empty_page.sections) == 1


def test_add_full_width_section_has_no_width(empty_page):
    page = section_ops.add_section(empty_page, True, height=600, desktop_width=1200, max_section_width=1200)
    assert page.sections[-1].full_width is True
    assert page.sections[-1].width is None


def test_delete_section_reparents_to_first_remaining(page_with_elements):
    page = section_ops.delete_section(page_with_elements, "sec-1")
    assert [s.id for s in page.sections] == ["sec-2"]
    assert all(el.section_id == "sec-2" for el in page.elements)


def test_delete_last_section_leaves_elements_sectionless(page_with_elements):
    page = section_ops.delete_section(page_with_elements, "sec-2")
    page = section_ops.delete_section(page, "sec-1")
    assert page.sections == []
    assert all(el.section_id is None for el in page.elements)


def test_delete_unknown_section_is_noop(page_with_elements):
    assert section_ops.delete_section(page_with_elements, "nope") is page_with_elements


def test_section_height_clamped_to_minimum(empty_page):
    page = section_ops.update_section_height(empty_page, "sec-1", 20)
    assert page.sections[0].height == 100


def test_section_height_keeps_percent_rects(page_with_elements):
    page = section_ops.update_section_height(page_with_elements, "sec-1", 1200)
    assert page.sections[0].height == 1200
    assert page.elements == page_with_elements.elements


def test_section_height_validator_repairs_loaded_value():
    assert Section(id="s", height=10).height == 100


def test_full_width_toggle_assigns_width():
    page = PageData(page_id="p", sections=[Section(id="s", full_width=True)])
    page = section_ops.update_section_full_width(page, "s", False, 1200)
    assert page.sections[0].full_width is False
    assert page.sections[0].width == 1200


def test_full_width_toggle_keeps_existing_width():
    page = PageData(page_id="p", sections=[Section(id="s", full_width=True, width=800)])
    page = section_ops.update_section_full_width(page, "s", False, 1200)
    assert page.sections[0].width == 800


def test_section_width_clamped_to_max_width():
    page = PageData(page_id="p", sections=[Section(id="s", width=800, max_width=900)])
    assert section_ops.update_section_width(page, "s", 2000, 1200).sections[0].width == 900
    assert section_ops.update_section_width(page, "s", 10, 1200).sections[0].width == section_ops.MIN_SECTION_WIDTH


def test_section_canvas_width():
    breakpoints = DEFAULT_BREAKPOINTS
    content = Section(id="c", width=1000)
    full = Section(id="f", full_width=True)
    assert section_ops.section_canvas_width(content, Breakpoint.DESKTOP, breakpoints, 1200) == 1000
    assert section_ops.section_canvas_width(content, Breakpoint.TABLET, breakpoints, 1200) == 768
    assert section_ops.section_canvas_width(full, Breakpoint.DESKTOP, breakpoints, 900) == 1200
    assert section_ops.section_canvas_width(None, Breakpoint.MOBILE, breakpoints, 1200) == 375
