"""High-level backup workflow from Notion to the local filesystem."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from notion_mirror.config import MirrorConfig
from notion_mirror.local.materializer import FilesystemMaterializer
from notion_mirror.notion.client import NotionClient, create_client
from notion_mirror.notion.throttle import RateLimiter
from notion_mirror.notion.tree import RemoteTreeClient
from notion_mirror.sync.engine import TraversalEngine
from notion_mirror.sync.index import write_index
from notion_mirror.sync.stats import RunStats

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BackupResult:
    """Report produced after a backup run."""

    root_page_id: str
    output_dir: Path
    pages_processed: int
    errors: int
    elapsed: float
    index_path: Optional[Path] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.errors == 0 else 1


class BackupService:
    """Mirror one Notion page tree into a local directory."""

    def __init__(
        self,
        tree: RemoteTreeClient,
        *,
        root_page_id: str,
        output_dir: Path,
        parallel: bool = True,
        clean_output: bool = False,
        stats: Optional[RunStats] = None,
    ) -> None:
        self.tree = tree
        self.root_page_id = root_page_id
        self.output_dir = output_dir
        self.parallel = parallel
        self.clean_output = clean_output
        self.stats = stats or RunStats()
        materializer = FilesystemMaterializer(tree, self.stats, output_root=output_dir)
        self.engine = TraversalEngine(
            tree,
            materializer,
            self.stats,
            output_root=output_dir,
            parallel=parallel,
        )

    async def run(self) -> BackupResult:
        started = time.monotonic()
        logger.info("Root page ID: %s", self.root_page_id)
        logger.info("Output directory: %s", self.output_dir)
        logger.info("Parallel processing: %s", self.parallel)
        logger.info("API delay: %sms", self.tree.limiter.delay_ms)

        if self.clean_output:
            logger.info("Cleaning output directory...")
            await asyncio.to_thread(shutil.rmtree, self.output_dir, ignore_errors=True)
        await asyncio.to_thread(self.output_dir.mkdir, parents=True, exist_ok=True)

        logger.info("Starting recursive page processing...")
        try:
            await self.engine.traverse(self.root_page_id)
        except Exception as exc:
            logger.error("Failed to process page tree: %s", exc)
            self.stats.record_error()

        logger.info("Generating backup index...")
        index_path: Optional[Path] = None
        try:
            index_path = await asyncio.to_thread(
                write_index,
                self.output_dir,
                root_page_id=self.root_page_id,
                stats=self.stats.snapshot(),
            )
        except Exception as exc:
            logger.error("Failed to write backup index: %s", exc)
            self.stats.record_error()

        snapshot = self.stats.snapshot()
        return BackupResult(
            root_page_id=self.root_page_id,
            output_dir=self.output_dir,
            pages_processed=snapshot.pages_processed,
            errors=snapshot.errors,
            elapsed=time.monotonic() - started,
            index_path=index_path,
        )


def build_tree_client(config: MirrorConfig, *, client: Optional[NotionClient] = None) -> RemoteTreeClient:
    if client is None:
        client = create_client(
            token=config.credentials.token,
            notion_version=config.credentials.notion_version,
        )
    limiter = RateLimiter(config.api_delay_ms, max_concurrency=config.max_concurrency)
    return RemoteTreeClient(client, limiter)


async def run_backup(config: MirrorConfig, *, client: Optional[NotionClient] = None) -> BackupResult:
    """Run a full backup described by ``config`` and close the HTTP client afterwards."""

    tree = build_tree_client(config, client=client)
    service = BackupService(
        tree,
        root_page_id=config.root_page_id,
        output_dir=config.output_dir,
        parallel=config.parallel_processing,
        clean_output=config.clean_output,
    )
    try:
        return await service.run()
    finally:
        await tree.client.close()
