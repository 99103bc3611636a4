# === FILE: spider_scout/crawler/scheduler.py ===
"""
Breadth-first crawl scheduling.

A fixed pool of worker tasks pulls jobs from the frontier and pushes each
outcome to a results queue.  A single control loop consumes the results; it
alone touches the visited set and the outstanding counter, and it ends the
crawl once the counter drops to zero.
"""
from __future__ import annotations

import asyncio
import enum
import time
from typing import List, Optional, Protocol, Set, Tuple

from spider_scout.crawler.models import CrawlError, CrawlJob, CrawlOutcome, CrawlSummary, FetchedPage
from spider_scout.crawler.url_resolver import is_web_url, strip_fragment
from spider_scout.logger import logger
from spider_scout.sink.base import ResultSink

__all__ = ("CrawlScheduler", "CrawlState", "Fetcher")

DEFAULT_WORKERS = 5
DEFAULT_DELAY = 0.1

_Result = Tuple[CrawlJob, CrawlOutcome]


class Fetcher(Protocol):
    async def fetch(self, url: str) -> CrawlOutcome:
        ...


class CrawlState(enum.Enum):
    IDLE = "idle"
    SEEDED = "seeded"
    RUNNING = "running"
    QUIESCENT = "quiescent"
    ABORTED = "aborted"


class CrawlScheduler:
    """Owns the frontier, the worker pool and the completion protocol."""

    def __init__(
        self,
        fetcher: Fetcher,
        sink: ResultSink,
        *,
        workers: int = DEFAULT_WORKERS,
        delay: float = DEFAULT_DELAY,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.fetcher = fetcher
        self.sink = sink
        self.workers = workers
        self.delay = delay
        self.visited: Set[str] = set()
        self.outstanding = 0
        self.state = CrawlState.IDLE
        self._frontier: Optional[asyncio.Queue[CrawlJob]] = None
        self._stopping = asyncio.Event()

    def stop(self) -> None:
        """Stop the running crawl: queued jobs are dropped, in-flight ones finish."""
        if not self._stopping.is_set():
            logger.info("Stop requested, draining %d outstanding job(s)", self.outstanding)
        self._stopping.set()

    async def run(self, seed: str) -> CrawlSummary:
        """Crawl everything reachable from *seed* and return once quiescent."""
        logger.info("Crawl started: %s", seed)
        start = time.monotonic()
        frontier: asyncio.Queue[CrawlJob] = asyncio.Queue()
        results: asyncio.Queue[_Result] = asyncio.Queue()
        self._frontier = frontier
        self.visited = set()
        self.outstanding = 0
        self._stopping.clear()
        summary = CrawlSummary(seed=seed)

        self._enqueue(CrawlJob(strip_fragment(seed), 0))
        self.state = CrawlState.SEEDED

        workers: List[asyncio.Task[None]] = [
            asyncio.create_task(self._worker(f"Crawler {i}", frontier, results))
            for i in range(self.workers)
        ]
        self.state = CrawlState.RUNNING
        try:
            while self.outstanding > 0:
                job, outcome = await results.get()
                self.outstanding -= 1
                if isinstance(outcome, CrawlError):
                    summary.failed[outcome.url] = outcome.reason
                    logger.warning("Error    %s - %s", outcome.url, outcome.reason)
                else:
                    summary.fetched.append(outcome.url)
                    logger.info("Spidered %s - Links %d", outcome.url, len(outcome.links))
                    await self.sink.write(outcome)
                    if not self._stopping.is_set():
                        self._schedule_links(job, outcome)
                if self._stopping.is_set():
                    self._drain_frontier()
        except BaseException:
            self.state = CrawlState.ABORTED
            raise
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            self._frontier = None
            try:
                await self.sink.close()
            except BaseException:
                self.state = CrawlState.ABORTED
                raise

        self.state = CrawlState.QUIESCENT
        summary.visited = frozenset(self.visited)
        duration = time.monotonic() - start
        logger.info(
            "Finished: %d page(s), %d error(s), %d unique url(s) in %.2f s",
            summary.pages, summary.errors, len(summary.visited), duration,
        )
        return summary

    def _queue(self) -> asyncio.Queue[CrawlJob]:
        if self._frontier is None:
            raise RuntimeError("no crawl is running")
        return self._frontier

    def _enqueue(self, job: CrawlJob) -> None:
        queue = self._queue()
        self.visited.add(job.url)
        queue.put_nowait(job)
        self.outstanding += 1

    def _schedule_links(self, job: CrawlJob, page: FetchedPage) -> None:
        added = 0
        for link in page.links:
            if not is_web_url(link):
                continue
            key = strip_fragment(link)
            if key in self.visited:
                continue
            self._enqueue(CrawlJob(key, job.depth + 1))
            added += 1
        if added:
            logger.debug("Queued %d new url(s) from %s", added, page.url)

    def _drain_frontier(self) -> None:
        queue = self._queue()
        while True:
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self.outstanding -= 1

    async def _worker(
        self,
        name: str,
        frontier: asyncio.Queue[CrawlJob],
        results: asyncio.Queue[_Result],
    ) -> None:
        while True:
            job = await frontier.get()
            logger.debug("[%s] Loading page %s", name, job.url)
            try:
                outcome = await self.fetcher.fetch(job.url)
            except Exception as exc:
                logger.exception("[%s] Unexpected failure while fetching %s", name, job.url)
                outcome = CrawlError(job.url, exc)
            results.put_nowait((job, outcome))
            if self.delay:
                await asyncio.sleep(self.delay)
