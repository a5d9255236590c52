"""Bounded-concurrency metadata fetching."""

from __future__ import annotations

import asyncio
from typing import Dict, Mapping, Optional, Protocol

from .logging import get_logger
from .models import RepoInfo, RepoRef

DEFAULT_CONCURRENCY = 10


class RepoInfoSource(Protocol):
    async def get_repo_info(self, owner: str, name: str) -> Optional[RepoInfo]:
        ...


class MetadataFetcher:
    """Resolves references to metadata with a fixed pool of worker tasks.

    Workers share one queue; each pops a URL, fetches it and moves on, so a
    slow or failing repository never holds up the rest of the batch. At most
    ``concurrency`` requests are in flight at any time.
    """

    def __init__(self, source: RepoInfoSource, *, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.source = source
        self.concurrency = concurrency
        self.logger = get_logger("fetcher")

    async def fetch_all(self, refs: Mapping[str, RepoRef]) -> Dict[str, RepoInfo]:
        """Return metadata keyed by URL; failed references are simply absent."""
        results: Dict[str, RepoInfo] = {}
        if not refs:
            return results

        queue: asyncio.Queue[RepoRef] = asyncio.Queue()
        for ref in refs.values():
            queue.put_nowait(ref)

        pool_size = min(self.concurrency, len(refs))
        workers = [
            asyncio.create_task(self._worker(queue, results), name=f"enhansome-fetch-{index}")
            for index in range(pool_size)
        ]
        await asyncio.gather(*workers)

        self.logger.debug(
            "Fetched info for %d of %d repositories using %d workers",
            len(results),
            len(refs),
            pool_size,
        )
        return results

    async def _worker(self, queue: asyncio.Queue[RepoRef], results: Dict[str, RepoInfo]) -> None:
        while True:
            try:
                ref = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                info = await self.source.get_repo_info(ref.owner, ref.name)
            except Exception as exc:
                # One bad reference must not take down the worker or its siblings.
                self.logger.error("Failed to process URL %s: %s", ref.url, exc)
                continue
            finally:
                queue.task_done()
            if info is not None:
                results[ref.url] = info


__all__ = ["DEFAULT_CONCURRENCY", "MetadataFetcher", "RepoInfoSource"]
