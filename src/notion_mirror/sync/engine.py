"""Recursive traversal of a Notion page tree into the local mirror."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from notion_mirror.local.models import OutputLocation
from notion_mirror.logs import indent
from notion_mirror.notion.models import ChildRef

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from notion_mirror.local.materializer import FilesystemMaterializer
    from notion_mirror.notion.tree import RemoteTreeClient
    from notion_mirror.sync.stats import RunStats

logger = logging.getLogger(__name__)


class TraversalEngine:
    """Materialize a page, then every descendant beneath it.

    Page ids are not deduplicated: a page linked from two parents is written
    twice, and a cyclic structure recurses without bound.
    """

    def __init__(
        self,
        tree: "RemoteTreeClient",
        materializer: "FilesystemMaterializer",
        stats: "RunStats",
        *,
        output_root: Path,
        parallel: bool = True,
    ) -> None:
        self.tree = tree
        self.materializer = materializer
        self.stats = stats
        self.output_root = output_root
        self.parallel = parallel

    async def traverse(self, page_id: str, parent_path: Optional[Path] = None, level: int = 0) -> None:
        location = OutputLocation(parent_path if parent_path is not None else self.output_root, level)
        prefix = indent(level)
        logger.debug("%sVisiting %s at level %d", prefix, page_id, level)

        try:
            page = await self.materializer.materialize(page_id, location)
        except Exception:
            # Already logged and counted by the materializer.
            return

        children = (await self.tree.fetch_children(page_id, title=page.title)).value or []
        if not children:
            return

        logger.info("%sFound %d child page(s)", prefix, len(children))
        child_dir = location.parent_path / page.stem
        await asyncio.to_thread(child_dir.mkdir, parents=True, exist_ok=True)

        if self.parallel:
            await asyncio.gather(*(self._traverse_child(child, child_dir, level) for child in children))
        else:
            for child in children:
                await self._traverse_child(child, child_dir, level)

    async def _traverse_child(self, child: ChildRef, child_dir: Path, level: int) -> None:
        try:
            await self.traverse(child.id, child_dir, level + 1)
        except Exception as exc:
            logger.error("%s  Child page %s failed: %s", indent(level), child.id, exc)
            self.stats.record_error()
