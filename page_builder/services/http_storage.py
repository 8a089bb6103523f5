"""
HTTP Page Storage
=================

Storage adapter backed by a remote page service:

    GET    {base}/pages/{page_id}          -> page JSON (404: no page)
    PUT    {base}/pages/{page_id}          -> optional normalized page JSON
    DELETE {base}/pages/{page_id}
    GET    {base}/pages/{page_id}/history  -> [snapshot]
    PUT    {base}/pages/{page_id}/history
    DELETE {base}/pages/{page_id}/history
"""

import os
import logging
from typing import Any, List, Optional

import httpx

from ..models.page_models import HistorySnapshot, PageData
from .storage import StorageError, parse_history, parse_page

logger = logging.getLogger(__name__)

PAGE_STORAGE_BASE_URL = os.getenv("PAGE_STORAGE_URL", "http://localhost:8090")


class HttpStorage:
    """Async storage adapter for a remote page service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or PAGE_STORAGE_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        logger.info(f"[HTTP-STORAGE] Initialized with timeout={timeout}, url={self.base_url}")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, json: Any = None) -> Optional[httpx.Response]:
        client = await self._get_client()
        try:
            response = await client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise StorageError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise StorageError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StorageError(f"{method} {path} returned HTTP {response.status_code}: {response.text[:200]}")
        return response

    @staticmethod
    def _json_or_none(response: Optional[httpx.Response]) -> Any:
        if response is None or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"Invalid JSON from page service: {e}") from e

    async def save(self, page_id: str, data: PageData) -> Optional[PageData]:
        response = await self._request("PUT", f"/pages/{page_id}", json=data.to_storage())
        if response is None:
            raise StorageError(f"Page service rejected save of {page_id} (404)")
        return parse_page(self._json_or_none(response), source=f"PUT /pages/{page_id}")

    async def load(self, page_id: str) -> Optional[PageData]:
        response = await self._request("GET", f"/pages/{page_id}")
        return parse_page(self._json_or_none(response), source=f"GET /pages/{page_id}")

    async def delete(self, page_id: str) -> None:
        await self._request("DELETE", f"/pages/{page_id}")

    async def save_history(self, page_id: str, snapshots: List[HistorySnapshot]) -> None:
        payload = [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in snapshots]
        await self._request("PUT", f"/pages/{page_id}/history", json=payload)

    async def load_history(self, page_id: str) -> Optional[List[HistorySnapshot]]:
        response = await self._request("GET", f"/pages/{page_id}/history")
        return parse_history(self._json_or_none(response), source=f"GET /pages/{page_id}/history")

    async def clear_history(self, page_id: str) -> None:
        await self._request("DELETE", f"/pages/{page_id}/history")
