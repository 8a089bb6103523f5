import pytest

from page_builder.models.config_models import PageBuilderConfig
from page_builder.models.page_models import (
    ElementLayout, LayoutRect, PageData, PageElement, Section
)
from page_builder.services.storage import MemoryStorage


def make_element(element_id, x, y, w=10, h=10, z_index=0, section_id="sec-1", **kwargs):
    """Element with the same rect on every breakpoint."""
    rect = LayoutRect(x=x, y=y, w=w, h=h)
    return PageElement(
        id=element_id,
        type=kwargs.pop("type", "text"),
        layout=ElementLayout(desktop=rect, tablet=rect, mobile=rect),
        z_index=z_index,
        section_id=section_id,
        **kwargs,
    )


@pytest.fixture
def config():
    """Config with auto-save disabled; tests opt in to timers explicitly."""
    return PageBuilderConfig(auto_save_delay=0, history_persist_delay=0.01)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def empty_page():
    """One 600px section, no elements."""
    return PageData(page_id="page-1", sections=[Section(id="sec-1", height=600)])


@pytest.fixture
def page_with_elements():
    """Three elements with z-indices 0, 1, 2 in one section."""
    return PageData(
        page_id="page-1",
        sections=[Section(id="sec-1", height=600), Section(id="sec-2", height=400)],
        elements=[
            make_element("a", 10, 10, z_index=0),
            make_element("b", 30, 10, z_index=1),
            make_element("c", 60, 50, z_index=2),
        ],
    )
