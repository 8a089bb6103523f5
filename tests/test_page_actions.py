"""
Tests for canvas.page_actions

Test Coverage:
- add_element defaults, placement and z-index
- layout updates and the responsive cache
- z-index reordering
- no-ops on unknown ids
"""
import pytest

from page_builder.canvas.page_actions import PageActions
from page_builder.layout.placement import rects_overlap
from page_builder.models.config_models import PageBuilderConfig
from page_builder.models.page_models import Breakpoint, LayoutRect, PageData, ZDirection


@pytest.fixture
def actions():
    return PageActions(PageBuilderConfig())


def test_add_element_to_first_section(actions, empty_page):
    page = actions.add_element(empty_page, "text", {"text": "Hello"})
    assert len(page.elements) == 1
    element = page.elements[0]
    assert element.type == "text"
    assert element.content == {"text": "Hello"}
    assert element.section_id == "sec-1"
    assert element.z_index == 0
    assert element.id.startswith("el-")
    assert empty_page.elements == []


def test_add_element_default_rect(actions, empty_page):
    element = actions.add_element(empty_page, "text").elements[0]
    desktop = element.layout.desktop
    # one 50px cell in from the top left of a 1200x600 section, 200x100px
    assert desktop.x == pytest.approx(50 / 1200 * 100)
    assert desktop.y == pytest.approx(50 / 600 * 100)
    assert desktop.w == pytest.approx(200 / 1200 * 100)
    assert desktop.h == pytest.approx(100 / 600 * 100)
    assert element.layout.tablet == desktop
    assert element.layout.mobile == desktop
    assert element.layout.responsive.left == desktop.x


def test_added_elements_do_not_overlap(actions, empty_page):
    page = empty_page
    for _ in range(5):
        page = actions.add_element(page, "image")
    # shrink slightly so edges that touch up to float noise do not count
    rects = [
        LayoutRect(x=r.x + 1e-6, y=r.y + 1e-6, w=r.w - 2e-6, h=r.h - 2e-6)
        for r in (el.layout.desktop for el in page.elements)
    ]
    for i, first in enumerate(rects):
        for second in rects[i + 1:]:
            assert not rects_overlap(first, second)
    assert [el.z_index for el in page.elements] == [0, 1, 2, 3, 4]


def test_add_element_to_unknown_section_is_noop(actions, empty_page):
    assert actions.add_element(empty_page, "text", section_id="missing") is empty_page


def test_add_element_to_sectionless_page_creates_section(actions):
    page = actions.add_element(PageData(page_id="p"), "text")
    assert len(page.sections) == 1
    section = page.sections[0]
    assert section.height == actions.config.default_section_height
    assert page.elements[0].section_id == section.id
    # sized against the new 600px section, not the 800px canvas default
    assert page.elements[0].layout.desktop.h == pytest.approx(100 / 600 * 100)


def test_add_element_keeps_external_id(actions, empty_page):
    page = actions.add_element(empty_page, "chart", external_id="chart-42")
    assert page.elements[0].external_id == "chart-42"


def test_update_element_ignores_id_and_unknown_fields(actions, page_with_elements):
    page = actions.update_element(page_with_elements, "a", id="zzz", bogus=1, snap_to_grid=False)
    element = page.get_element("a")
    assert element is not None
    assert element.snap_to_grid is False
    assert page.get_element("zzz") is None


def test_update_element_content_replaces_content(actions, page_with_elements):
    page = actions.update_element_content(page_with_elements, "b", {"text": "new"})
    assert page.get_element("b").content == {"text": "new"}
    assert page_with_elements.get_element("b").content == {}


def test_update_layout_desktop_refreshes_responsive(actions, page_with_elements):
    rect = LayoutRect(x=40, y=40, w=20, h=20)
    page = actions.update_layout(page_with_elements, "a", Breakpoint.DESKTOP, rect)
    layout = page.get_element("a").layout
    assert layout.desktop == rect
    assert (layout.responsive.left, layout.responsive.top) == (40, 40)
    # other breakpoints untouched
    assert layout.mobile == page_with_elements.get_element("a").layout.mobile


def test_update_layout_mobile_keeps_desktop(actions, page_with_elements):
    rect = LayoutRect(x=0, y=0, w=100, h=20)
    page = actions.update_layout(page_with_elements, "a", Breakpoint.MOBILE, rect)
    layout = page.get_element("a").layout
    assert layout.mobile == rect
    assert layout.desktop == page_with_elements.get_element("a").layout.desktop
    # cache synthesized from desktop when missing
    assert layout.responsive.left == 10


def test_update_layout_bulk_single_pass(actions, page_with_elements):
    updates = [("a", LayoutRect(x=15, y=10, w=10, h=10)), ("b", LayoutRect(x=35, y=10, w=10, h=10))]
    page = actions.update_layout_bulk(page_with_elements, updates, Breakpoint.DESKTOP)
    assert page.get_element("a").layout.desktop.x == 15
    assert page.get_element("b").layout.desktop.x == 35
    assert page.get_element("c") is page_with_elements.get_element("c")


def test_update_layout_unknown_id_is_noop(actions, page_with_elements):
    rect = LayoutRect(x=1, y=1, w=1, h=1)
    assert actions.update_layout(page_with_elements, "nope", Breakpoint.DESKTOP, rect) is page_with_elements
    assert actions.update_layout_bulk(page_with_elements, [], Breakpoint.DESKTOP) is page_with_elements


def test_z_index_down_goes_below_everything(actions, page_with_elements):
    page = actions.update_z_index(page_with_elements, "c", ZDirection.DOWN)
    z_c = page.get_element("c").z_index
    assert z_c < 0
    assert all(z_c < el.z_index for el in page.elements if el.id != "c")


def test_z_index_up_goes_above_everything(actions, page_with_elements):
    page = actions.update_z_index(page_with_elements, "a", "up")
    assert page.get_element("a").z_index == 3


def test_z_index_unknown_id_is_noop(actions, page_with_elements):
    assert actions.update_z_index(page_with_elements, "nope", ZDirection.UP) is page_with_elements


def test_delete_element(actions, page_with_elements):
    page = actions.delete_element(page_with_elements, "b")
    assert [el.id for el in page.elements] == ["a", "c"]
    assert actions.delete_element(page, "b") is page


def test_section_wrappers_use_config(page_with_elements):
    actions = PageActions(PageBuilderConfig(default_section_height=450, max_section_width=1000))
    page = actions.add_section(page_with_elements)
    added = page.sections[-1]
    assert added.height == 450
    assert added.width == 1000


def test_grid_steps_for_section(actions, page_with_elements):
    step_x, step_y, width, height = actions.grid_steps(page_with_elements, "sec-2")
    assert (width, height) == (1200, 400)
    assert step_x == pytest.approx(50 / 1200 * 100)
    assert step_y == pytest.approx(12.5)
