"""Typed models for Notion API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True, frozen=True)
class ChildRef:
    """Reference to a direct child page discovered while listing blocks."""

    id: str
    title: str


@dataclass(slots=True)
class Block:
    """A single Notion block with its type-specific payload."""

    id: str
    type: str
    payload: dict
    has_children: bool = False
    children: list["Block"] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Block":
        block_type = data.get("type", "unsupported")
        return cls(
            id=str(data["id"]),
            type=block_type,
            payload=data.get(block_type) or {},
            has_children=bool(data.get("has_children")),
        )

    @property
    def child_ref(self) -> Optional[ChildRef]:
        if self.type != "child_page":
            return None
        return ChildRef(id=self.id, title=self.payload.get("title", ""))


@dataclass(slots=True)
class BlockPage:
    """One page of a paginated block listing."""

    results: list[dict]
    next_cursor: Optional[str]


@dataclass(slots=True)
class PageSummary:
    """Minimal page description returned by the search endpoint."""

    id: str
    title: str
    url: Optional[str] = None
    last_edited_time: Optional[str] = None


def extract_title(properties: dict) -> Optional[str]:
    """Return the plain text of the ``title`` property, or ``None`` when empty."""

    for prop in properties.values():
        if prop.get("type") != "title":
            continue
        fragments = prop.get("title") or []
        text = "".join(fragment.get("plain_text", "") for fragment in fragments)
        return text or None
    return None
