"""Dataclasses describing where pages land in the local mirror."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class OutputLocation:
    """Target directory and nesting level for one page."""

    parent_path: Path
    level: int = 0


@dataclass(slots=True, frozen=True)
class MaterializedPage:
    """Result of writing a page to disk."""

    page_id: str
    title: str
    filename: str
    path: Path

    @property
    def stem(self) -> str:
        return self.path.stem
