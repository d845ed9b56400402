"""Async HTTP client wrapper for the Notion REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from notion_mirror.config import DEFAULT_NOTION_VERSION
from notion_mirror.errors import NotionAPIError

from .models import BlockPage, PageSummary, extract_title


API_ROOT = "https://api.notion.com/v1/"
DEFAULT_PAGE_SIZE = 100


@dataclass(slots=True)
class NotionAuth:
    """Authentication payload used by the Notion client."""

    token: str
    notion_version: str = DEFAULT_NOTION_VERSION


class NotionClient:
    """Thin async wrapper above the Notion REST API."""

    def __init__(
        self,
        *,
        auth: NotionAuth,
        base_url: str = API_ROOT,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {auth.token}",
            "Notion-Version": auth.notion_version,
        }
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------
    async def _request(self, method: str, url: str, **kwargs) -> dict:
        response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            raise _to_api_error(response)
        return response.json()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def retrieve_page(self, page_id: str) -> dict:
        return await self._request("GET", f"pages/{page_id}")

    async def list_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> BlockPage:
        params: dict[str, object] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor
        data = await self._request("GET", f"blocks/{block_id}/children", params=params)
        return BlockPage(
            results=list(data.get("results", [])),
            next_cursor=data.get("next_cursor") if data.get("has_more", True) else None,
        )

    async def search_pages(
        self,
        *,
        query: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> AsyncIterator[PageSummary]:
        payload: dict[str, object] = {
            "filter": {"property": "object", "value": "page"},
            "page_size": page_size,
        }
        if query:
            payload["query"] = query
        cursor: Optional[str] = None
        while True:
            if cursor:
                payload["start_cursor"] = cursor
            data = await self._request("POST", "search", json=payload)
            for result in data.get("results", []):
                yield _to_page_summary(result)
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break


def _to_page_summary(data: dict) -> PageSummary:
    page_id = str(data["id"])
    title = extract_title(data.get("properties", {})) or f"Untitled-{page_id[:8]}"
    return PageSummary(
        id=page_id,
        title=title,
        url=data.get("url"),
        last_edited_time=data.get("last_edited_time"),
    )


def _to_api_error(response: httpx.Response) -> NotionAPIError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("message") if isinstance(body, dict) else None
    code = body.get("code") if isinstance(body, dict) else None
    return NotionAPIError(
        response.status_code,
        message or response.reason_phrase or "request failed",
        code=code,
    )


def create_client(*, token: str, notion_version: str = DEFAULT_NOTION_VERSION) -> NotionClient:
    return NotionClient(auth=NotionAuth(token=token, notion_version=notion_version))
