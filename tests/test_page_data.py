"""
Tests for canvas.page_data

Test Coverage:
- loading, normalization and the initial-data override
- optimistic save ordering and failure handling
- dirty tracking against the saved baseline
- debounced auto-save and cancellation
"""
import asyncio

import pytest

from page_builder.canvas.page_data import ORIGIN_EDIT, ORIGIN_SYNC, PageDataManager
from page_builder.models.config_models import PageBuilderConfig
from page_builder.models.page_models import PageData, documents_equal
from page_builder.services.storage import MemoryStorage

from conftest import make_element


class RecordingStorage(MemoryStorage):
    """Records the order of save events; optionally fails or rewrites."""

    def __init__(self, events=None, fail=False, rewrite=None):
        super().__init__()
        self.events = events if events is not None else []
        self.fail = fail
        self.rewrite = rewrite
        self.saves = 0

    async def save(self, page_id, data):
        self.events.append("storage.save")
        self.saves += 1
        if self.fail:
            raise RuntimeError("network down")
        super().save(page_id, data)
        if self.rewrite is not None:
            return self.rewrite(data)
        return None


def add_text(data: PageData) -> PageData:
    el = make_element(f"t{len(data.elements)}", 0, 0, section_id=data.sections[0].id)
    return data.model_copy(update={"elements": [*data.elements, el]})


@pytest.mark.asyncio
async def test_load_from_storage_normalizes_legacy(config):
    storage = MemoryStorage()
    storage.save("page-1", PageData(page_id="page-1", elements=[make_element("a", 0, 0, section_id=None)]))
    manager = PageDataManager("page-1", storage, config)

    data = await manager.load()
    assert len(data.sections) == 1
    assert data.get_element("a").section_id == data.sections[0].id
    assert data.get_element("a").layout.responsive is not None
    assert manager.is_dirty is False


@pytest.mark.asyncio
async def test_load_missing_page_gives_empty_sectioned_page(config, storage):
    manager = PageDataManager("new-page", storage, config)
    data = await manager.load()
    assert data.page_id == "new-page"
    assert data.elements == []
    assert len(data.sections) == 1
    assert data.sections[0].height == config.default_section_height


@pytest.mark.asyncio
async def test_initial_data_overrides_storage(config, storage, page_with_elements):
    storage.save("page-1", PageData(page_id="page-1"))
    manager = PageDataManager("page-1", storage, config, initial_data=page_with_elements)
    data = await manager.load()
    assert [el.id for el in data.elements] == ["a", "b", "c"]
    assert not manager.is_dirty


@pytest.mark.asyncio
async def test_corrupt_storage_payload_is_logged_not_raised(config, storage):
    storage._pages["page-1"] = {"pageId": "page-1", "elements": [{"id": "x"}]}
    manager = PageDataManager("page-1", storage, config)
    data = await manager.load()
    assert data.elements == []


@pytest.mark.asyncio
async def test_on_save_fires_before_storage(config, empty_page):
    events = []
    storage = RecordingStorage(events=events)
    manager = PageDataManager(
        "page-1", storage, config,
        initial_data=empty_page,
        on_save=lambda data: events.append("on_save"),
        on_saved=lambda data: events.append("on_saved"),
    )
    await manager.load()
    assert await manager.save() is True
    assert events == ["on_save", "storage.save", "on_saved"]


@pytest.mark.asyncio
async def test_dirty_flips_with_edits_and_saves(config, empty_page):
    flips = []
    manager = PageDataManager(
        "page-1", RecordingStorage(), config,
        initial_data=empty_page,
        on_dirty_change=flips.append,
    )
    await manager.load()
    assert not manager.is_dirty

    manager.set_page_data(add_text)
    assert manager.is_dirty

    await manager.save()
    assert not manager.is_dirty
    assert flips == [True, False]


@pytest.mark.asyncio
async def test_edit_back_to_baseline_is_clean(config, empty_page):
    manager = PageDataManager("page-1", RecordingStorage(), config, initial_data=empty_page)
    await manager.load()
    original = manager.page_data
    manager.set_page_data(add_text)
    manager.set_page_data(original.model_copy())
    assert not manager.is_dirty


@pytest.mark.asyncio
async def test_failed_save_keeps_document_and_dirty(config, empty_page):
    saved = []
    manager = PageDataManager(
        "page-1", RecordingStorage(fail=True), config,
        initial_data=empty_page,
        on_saved=saved.append,
    )
    await manager.load()
    edited = manager.set_page_data(add_text)
    assert await manager.save() is False
    assert manager.page_data is edited
    assert manager.is_dirty
    assert saved == []


@pytest.mark.asyncio
async def test_storage_result_is_adopted(config, empty_page):
    def server_side(data):
        return data.model_copy(update={"elements": [*data.elements, make_element("srv", 50, 50, section_id="sec-1")]})

    changes = []
    manager = PageDataManager(
        "page-1", RecordingStorage(rewrite=server_side), config,
        initial_data=empty_page,
        on_change=lambda data, origin: changes.append(origin),
    )
    await manager.load()
    manager.set_page_data(add_text)
    await manager.save()

    assert manager.page_data.get_element("srv") is not None
    assert changes == [ORIGIN_EDIT, ORIGIN_SYNC]
    assert not manager.is_dirty


@pytest.mark.asyncio
async def test_storage_result_does_not_clobber_newer_edit(config, empty_page):
    def server_side(data):
        return data.model_copy(update={"elements": []})

    manager = PageDataManager("page-1", RecordingStorage(rewrite=server_side), config, initial_data=empty_page)
    await manager.load()
    first = manager.set_page_data(add_text)
    newer = add_text(first)
    # save an older document while a newer one is live
    manager.set_page_data(newer)
    await manager.save(first)
    assert manager.page_data is newer
    assert manager.is_dirty


@pytest.mark.asyncio
async def test_set_page_data_with_same_object_is_ignored(config, empty_page):
    changes = []
    manager = PageDataManager(
        "page-1", MemoryStorage(), config,
        initial_data=empty_page,
        on_change=lambda data, origin: changes.append(origin),
    )
    await manager.load()
    manager.set_page_data(lambda data: data)
    assert changes == []


@pytest.mark.asyncio
async def test_auto_save_after_quiet_period(empty_page):
    storage = RecordingStorage()
    manager = PageDataManager(
        "page-1", storage, PageBuilderConfig(auto_save_delay=0.02), initial_data=empty_page
    )
    await manager.load()
    manager.set_page_data(add_text)
    manager.set_page_data(add_text)
    manager.set_page_data(add_text)
    assert storage.saves == 0

    await asyncio.sleep(0.08)
    assert storage.saves == 1
    assert len(storage.load("page-1").elements) == 3
    assert not manager.is_dirty


@pytest.mark.asyncio
async def test_auto_save_skipped_when_clean(empty_page):
    storage = RecordingStorage()
    manager = PageDataManager(
        "page-1", storage, PageBuilderConfig(auto_save_delay=0.01), initial_data=empty_page
    )
    await manager.load()
    original = manager.page_data
    manager.set_page_data(add_text)
    manager.set_page_data(original.model_copy())
    await asyncio.sleep(0.05)
    assert storage.saves == 0


@pytest.mark.asyncio
async def test_close_cancels_pending_auto_save(empty_page):
    storage = RecordingStorage()
    manager = PageDataManager(
        "page-1", storage, PageBuilderConfig(auto_save_delay=0.02), initial_data=empty_page
    )
    await manager.load()
    manager.set_page_data(add_text)
    await manager.close()
    await asyncio.sleep(0.06)
    assert storage.saves == 0


@pytest.mark.asyncio
async def test_flush_runs_pending_auto_save(empty_page):
    storage = RecordingStorage()
    manager = PageDataManager(
        "page-1", storage, PageBuilderConfig(auto_save_delay=10), initial_data=empty_page
    )
    await manager.load()
    manager.set_page_data(add_text)
    await manager.flush()
    assert storage.saves == 1
    assert documents_equal(storage.load("page-1"), manager.page_data)


@pytest.mark.asyncio
async def test_replaced_callback_is_used_by_armed_timer(empty_page):
    saved = []
    manager = PageDataManager(
        "page-1", RecordingStorage(), PageBuilderConfig(auto_save_delay=0.02), initial_data=empty_page,
        on_saved=lambda data: saved.append("old"),
    )
    await manager.load()
    manager.set_page_data(add_text)
    manager.on_saved.set(lambda data: saved.append("new"))
    await asyncio.sleep(0.06)
    assert saved == ["new"]
