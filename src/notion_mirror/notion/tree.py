"""Page-tree façade over the Notion client.

Every remote call made here goes through the shared :class:`RateLimiter`.
Title and child lookups degrade to safe defaults; content rendering is the
only operation whose failure reaches the caller.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from notion_mirror.errors import ContentConversionError
from notion_mirror.render.converter import ContentConverter

from .client import NotionClient
from .models import Block, ChildRef, extract_title
from .throttle import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchStatus(enum.Enum):
    OK = "ok"
    DEFAULTED = "defaulted"


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Outcome of a remote lookup.

    ``DEFAULTED`` results carry a usable fallback ``value`` and, when a request
    or payload failed, the ``error`` that caused it.
    """

    status: FetchStatus
    value: T
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(FetchStatus.OK, value)

    @classmethod
    def defaulted(cls, value: T, error: Optional[BaseException] = None) -> "FetchResult[T]":
        return cls(FetchStatus.DEFAULTED, value, error)

    @property
    def recovered(self) -> bool:
        return self.status is FetchStatus.DEFAULTED


def fallback_title(page_id: str) -> str:
    return f"Untitled-{page_id[:8]}"


class RemoteTreeClient:
    """Fetch titles, child references and rendered content for pages."""

    def __init__(
        self,
        client: NotionClient,
        limiter: RateLimiter,
        *,
        converter: Optional[ContentConverter] = None,
    ) -> None:
        self.client = client
        self.limiter = limiter
        self.converter = converter or ContentConverter()

    async def fetch_title(self, page_id: str) -> FetchResult[str]:
        try:
            async with self.limiter.slot():
                page = await self.client.retrieve_page(page_id)
            title = extract_title(page.get("properties") or {})
        except Exception as exc:
            logger.error("Failed to retrieve title for %s: %s", page_id, exc)
            return FetchResult.defaulted(fallback_title(page_id), exc)

        if not title:
            logger.warning("Page %s has no title, using %s", page_id, fallback_title(page_id))
            return FetchResult.defaulted(fallback_title(page_id))
        return FetchResult.ok(title)

    async def fetch_children(self, page_id: str, *, title: Optional[str] = None) -> FetchResult[list[ChildRef]]:
        children: list[ChildRef] = []
        cursor: Optional[str] = None
        try:
            while True:
                async with self.limiter.slot():
                    listing = await self.client.list_block_children(page_id, start_cursor=cursor)
                for data in listing.results:
                    ref = Block.from_api(data).child_ref
                    if ref is not None:
                        logger.debug("Retrieved child page %s of page %s", ref.title, title or page_id)
                        children.append(ref)
                cursor = listing.next_cursor
                if not cursor:
                    break
        except Exception as exc:
            logger.error("Failed to retrieve child pages for %s: %s", page_id, exc)
            return FetchResult.defaulted(children, exc)
        return FetchResult.ok(children)

    async def fetch_content(self, page_id: str) -> str:
        try:
            blocks = await self._fetch_block_tree(page_id)
            return self.converter.blocks_to_markdown(blocks)
        except Exception as exc:
            logger.error("Failed to convert page %s: %s", page_id, exc)
            if isinstance(exc, ContentConversionError):
                raise
            raise ContentConversionError(page_id, str(exc)) from exc

    async def _fetch_block_tree(self, block_id: str) -> list[Block]:
        blocks: list[Block] = []
        cursor: Optional[str] = None
        while True:
            async with self.limiter.slot():
                listing = await self.client.list_block_children(block_id, start_cursor=cursor)
            blocks.extend(Block.from_api(data) for data in listing.results)
            cursor = listing.next_cursor
            if not cursor:
                break

        for block in blocks:
            # Child pages are mirrored as files of their own.
            if block.has_children and block.type not in ("child_page", "child_database"):
                block.children = await self._fetch_block_tree(block.id)
        return blocks
