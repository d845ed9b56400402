"""Write rendered Notion pages into the local mirror."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter

from notion_mirror.errors import MaterializationError, NotionMirrorError
from notion_mirror.logs import indent, log_success

from .models import MaterializedPage, OutputLocation
from .naming import sanitize_filename, truncate_utf8

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from notion_mirror.notion.tree import RemoteTreeClient
    from notion_mirror.sync.stats import RunStats

logger = logging.getLogger(__name__)

PAGE_EXTENSION = ".md"


def page_stem(title: str, page_id: str) -> str:
    """Name shared by a page's file and the directory holding its children."""

    return sanitize_filename(title, fallback=page_id)


class FilesystemMaterializer:
    """Persist pages as Markdown files with YAML frontmatter."""

    def __init__(self, tree: "RemoteTreeClient", stats: "RunStats", *, output_root: Path) -> None:
        self.tree = tree
        self.stats = stats
        self.output_root = output_root

    async def materialize(self, page_id: str, location: OutputLocation) -> MaterializedPage:
        prefix = indent(location.level)
        try:
            logger.info("%sProcessing: %s", prefix, page_id)
            title = (await self.tree.fetch_title(page_id)).value
            logger.debug('%sTitle: "%s"', prefix, title)

            content = await self.tree.fetch_content(page_id)

            filename = page_stem(title, page_id) + PAGE_EXTENSION
            path = location.parent_path / filename
            text = render_document(
                content,
                title=title,
                page_id=page_id,
                level=location.level,
                relative_path=self._relative(path),
            )
            await asyncio.to_thread(write_atomic, path, text)
        except Exception as exc:
            logger.error("%sFailed to process page %s: %s", prefix, page_id, exc)
            self.stats.record_error()
            if isinstance(exc, NotionMirrorError):
                raise
            raise MaterializationError(page_id, str(exc)) from exc

        log_success(logger, "%sSaved: %s", prefix, filename)
        self.stats.record_page()
        return MaterializedPage(page_id=page_id, title=title, filename=filename, path=path)

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.output_root).as_posix()
        except ValueError:
            return path.as_posix()


def render_document(content: str, *, title: str, page_id: str, level: int, relative_path: str) -> str:
    post = frontmatter.Post(content)
    post.metadata.update(
        {
            "title": title,
            "notion_id": page_id,
            "level": level,
            "path": relative_path,
        }
    )
    return frontmatter.dumps(post) + "\n"


def write_atomic(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temporary file and move it over ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{truncate_utf8(path.stem, 50)}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(text)
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise
