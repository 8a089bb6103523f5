"""
Page Storage
============

Storage capability consumed by the editor, plus local adapters.

Adapters may implement any method synchronously or asynchronously; callers
go through maybe_await(). History methods and delete are optional.
"""

import inspect
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import ValidationError

from ..models.page_models import HistorySnapshot, PageData

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised by adapters for transport failures and corrupt payloads."""


@runtime_checkable
class StorageAdapter(Protocol):
    """Required storage operations. Optional: delete, save_history, load_history, clear_history."""

    def save(self, page_id: str, data: PageData) -> Any: ...

    def load(self, page_id: str) -> Any: ...


async def maybe_await(value: Any) -> Any:
    """Await coroutines and futures; pass plain values through."""
    if inspect.isawaitable(value):
        return await value
    return value


def parse_page(raw: Any, source: str = "storage") -> Optional[PageData]:
    """Validate a raw payload into a PageData."""
    if raw is None:
        return None
    if isinstance(raw, PageData):
        return raw
    try:
        return PageData.model_validate(raw)
    except ValidationError as e:
        raise StorageError(f"Corrupt page payload from {source}: {e}") from e


def parse_history(raw: Any, source: str = "storage") -> Optional[List[HistorySnapshot]]:
    """Validate a raw history payload into snapshots."""
    if raw is None:
        return None
    try:
        return [
            item if isinstance(item, HistorySnapshot) else HistorySnapshot.model_validate(item)
            for item in raw
        ]
    except (ValidationError, TypeError) as e:
        raise StorageError(f"Corrupt history payload from {source}: {e}") from e


class MemoryStorage:
    """In-process storage for development and tests."""

    def __init__(self):
        self._pages: Dict[str, Dict[str, Any]] = {}
        self._history: Dict[str, List[Dict[str, Any]]] = {}

    def save(self, page_id: str, data: PageData) -> None:
        self._pages[page_id] = data.to_storage()

    def load(self, page_id: str) -> Optional[PageData]:
        return parse_page(self._pages.get(page_id), source=f"memory:{page_id}")

    def delete(self, page_id: str) -> None:
        self._pages.pop(page_id, None)
        self._history.pop(page_id, None)

    def save_history(self, page_id: str, snapshots: List[HistorySnapshot]) -> None:
        self._history[page_id] = [
            s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in snapshots
        ]

    def load_history(self, page_id: str) -> Optional[List[HistorySnapshot]]:
        return parse_history(self._history.get(page_id), source=f"memory:{page_id}")

    def clear_history(self, page_id: str) -> None:
        self._history.pop(page_id, None)


class JsonFileStorage:
    """Pages as JSON files: <page_id>.json and <page_id>-history.json."""

    def __init__(self, pages_dir: Optional[Path] = None):
        self.pages_dir = Path(pages_dir or "pages")
        self.pages_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"[STORAGE] Initialized with pages_dir={self.pages_dir}")

    def _page_path(self, page_id: str) -> Path:
        return self.pages_dir / f"{page_id}.json"

    def _history_path(self, page_id: str) -> Path:
        return self.pages_dir / f"{page_id}-history.json"

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON in {path}: {e}") from e

    def _write_json(self, path: Path, payload: Any) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(path)

    def save(self, page_id: str, data: PageData) -> None:
        self._write_json(self._page_path(page_id), data.to_storage())
        logger.debug(f"[STORAGE] Saved page {page_id}")

    def load(self, page_id: str) -> Optional[PageData]:
        path = self._page_path(page_id)
        return parse_page(self._read_json(path), source=str(path))

    def delete(self, page_id: str) -> None:
        for path in (self._page_path(page_id), self._history_path(page_id)):
            path.unlink(missing_ok=True)
        logger.info(f"[STORAGE] Deleted page {page_id}")

    def save_history(self, page_id: str, snapshots: List[HistorySnapshot]) -> None:
        self._write_json(
            self._history_path(page_id),
            [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in snapshots],
        )

    def load_history(self, page_id: str) -> Optional[List[HistorySnapshot]]:
        path = self._history_path(page_id)
        return parse_history(self._read_json(path), source=str(path))

    def clear_history(self, page_id: str) -> None:
        self._history_path(page_id).unlink(missing_ok=True)
