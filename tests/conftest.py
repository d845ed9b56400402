"""Shared fixtures: an in-memory Notion workspace behind the client interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

from notion_mirror.errors import NotionAPIError
from notion_mirror.notion.models import BlockPage
from notion_mirror.notion.throttle import RateLimiter
from notion_mirror.notion.tree import RemoteTreeClient


@dataclass
class FakePage:
    title: Optional[str]
    children: list[str] = field(default_factory=list)
    text: str = ""


def paragraph(block_id: str, text: str) -> dict:
    return {
        "id": block_id,
        "type": "paragraph",
        "has_children": False,
        "paragraph": {"rich_text": [{"plain_text": text}]},
    }


def child_page(block_id: str, title: str) -> dict:
    return {
        "id": block_id,
        "type": "child_page",
        "has_children": True,
        "child_page": {"title": title},
    }


class FakeNotionClient:
    """Serve a fixed page tree through the ``NotionClient`` interface.

    Block listings contain one paragraph with the page text followed by one
    ``child_page`` block per child, split into pages of ``page_size`` results.
    """

    def __init__(self, pages: dict[str, FakePage], *, page_size: int = 2) -> None:
        self.pages = pages
        self.page_size = page_size
        self.failing_titles: set[str] = set()
        self.failing_listings: set[str] = set()
        self.malformed_titles: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def retrieve_page(self, page_id: str) -> dict:
        self.calls.append(("retrieve_page", page_id))
        if page_id in self.failing_titles or page_id not in self.pages:
            raise NotionAPIError(404, f"Could not find page with ID: {page_id}", code="object_not_found")
        if page_id in self.malformed_titles:
            return {"id": page_id, "properties": {"Name": "not-a-dict"}}
        title = self.pages[page_id].title
        fragments = [{"plain_text": title}] if title else []
        return {"id": page_id, "properties": {"Name": {"type": "title", "title": fragments}}}

    async def list_block_children(self, block_id: str, *, start_cursor: Optional[str] = None, page_size: int = 100) -> BlockPage:
        self.calls.append(("list_block_children", block_id))
        if block_id in self.failing_listings:
            raise NotionAPIError(502, "Bad gateway")
        page = self.pages[block_id]
        results = [paragraph(f"{block_id}-text", page.text or f"Body of {page.title}")]
        results += [child_page(child, self.pages[child].title or "") for child in page.children]

        offset = int(start_cursor or 0)
        chunk = results[offset:offset + self.page_size]
        next_offset = offset + self.page_size
        next_cursor = str(next_offset) if next_offset < len(results) else None
        return BlockPage(results=chunk, next_cursor=next_cursor)

    async def close(self) -> None:
        self.closed = True


def sample_tree() -> dict[str, FakePage]:
    """Root ``R`` with children ``A`` and ``B``; ``A`` has one child ``C``."""

    return {
        "R": FakePage("R", ["A", "B"]),
        "A": FakePage("A", ["C"]),
        "B": FakePage("B"),
        "C": FakePage("C"),
    }


def wide_tree() -> dict[str, FakePage]:
    pages = {"root-page-0001": FakePage("Handbook", [f"section-{i:04d}" for i in range(5)])}
    for i in range(5):
        section = f"section-{i:04d}"
        leaves = [f"leaf-{i:02d}-{j:02d}-xxxx" for j in range(3)]
        pages[section] = FakePage(f"Section {i}", leaves)
        for j, leaf in enumerate(leaves):
            pages[leaf] = FakePage(f"Topic {i}.{j}")
    return pages


@pytest.fixture
def fake_client() -> FakeNotionClient:
    return FakeNotionClient(sample_tree())


@pytest.fixture
def tree_client(fake_client: FakeNotionClient) -> RemoteTreeClient:
    return RemoteTreeClient(fake_client, RateLimiter(0))


def relative_files(root: Path) -> set[str]:
    return {path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()}
