"""Backup index written at the root of the mirror after a run."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import frontmatter

from notion_mirror.local.materializer import PAGE_EXTENSION, write_atomic
from notion_mirror.sync.stats import StatsSnapshot

INDEX_FILENAME = "INDEX.md"


def iter_page_files(directory: Path, *, depth: int = 0) -> Iterator[tuple[int, Path]]:
    """Yield ``(depth, path)`` for every page file, parents before children."""

    for candidate in sorted(directory.iterdir()):
        if not candidate.is_file() or candidate.suffix != PAGE_EXTENSION:
            continue
        if candidate.name.startswith(".") or (depth == 0 and candidate.name == INDEX_FILENAME):
            continue
        yield depth, candidate
        child_dir = candidate.with_suffix("")
        if child_dir.is_dir():
            yield from iter_page_files(child_dir, depth=depth + 1)


def build_index(output_root: Path, *, root_page_id: str, stats: StatsSnapshot) -> str:
    lines = ["# Notion Backup Index", ""]
    for depth, path in iter_page_files(output_root):
        title = frontmatter.load(path).metadata.get("title", path.stem)
        relative = path.relative_to(output_root).as_posix()
        lines.append(f"{'  ' * depth}- [{title}](<{relative}>)")

    post = frontmatter.Post("\n".join(lines))
    post.metadata.update(
        {
            "root_page_id": root_page_id,
            "pages_processed": stats.pages_processed,
            "errors": stats.errors,
        }
    )
    return frontmatter.dumps(post) + "\n"


def write_index(output_root: Path, *, root_page_id: str, stats: StatsSnapshot) -> Path:
    path = output_root / INDEX_FILENAME
    write_atomic(path, build_index(output_root, root_page_id=root_page_id, stats=stats))
    return path
