# spider_scout/sink/base.py
"""
Result sink protocol and the sinks that need no external service.
"""
from __future__ import annotations

import asyncio
from typing import List, Protocol, runtime_checkable

from spider_scout.crawler.models import FetchedPage
from spider_scout.exceptions import SinkWriteFailure
from spider_scout.logger import logger

__all__ = ("ResultSink", "NullSink", "MemorySink", "GuardedSink", "SINK_POLICIES")

SINK_POLICIES = ("fatal", "log", "retry")


@runtime_checkable
class ResultSink(Protocol):
    """Receives every fetched page of a crawl, then is closed once."""

    async def write(self, page: FetchedPage) -> None:
        ...

    async def close(self) -> None:
        ...


class NullSink:
    """Discards pages."""

    async def write(self, page: FetchedPage) -> None:
        return None

    async def close(self) -> None:
        return None


class MemorySink:
    """Keeps pages in arrival order."""

    def __init__(self) -> None:
        self.pages: List[FetchedPage] = []
        self.closed = False

    async def write(self, page: FetchedPage) -> None:
        self.pages.append(page)

    async def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> List[str]:
        return [p.url for p in self.pages]


class GuardedSink:
    """Applies a failure policy to another sink.

    ``fatal`` lets :class:`SinkWriteFailure` escape and stop the crawl,
    ``log`` records it and carries on, ``retry`` tries again with exponential
    backoff up to *retries* more times before logging. A failure while
    closing follows the same policy, without retries.
    """

    def __init__(
        self,
        sink: ResultSink,
        policy: str = "log",
        *,
        retries: int = 3,
        backoff: float = 0.5,
    ) -> None:
        if policy not in SINK_POLICIES:
            raise ValueError(f"Unknown sink policy {policy!r}, expected one of {SINK_POLICIES}")
        self.sink = sink
        self.policy = policy
        self.retries = retries if policy == "retry" else 0
        self.backoff = backoff
        self.failures: List[SinkWriteFailure] = []

    async def write(self, page: FetchedPage) -> None:
        attempts = 0
        while True:
            try:
                await self.sink.write(page)
                return
            except SinkWriteFailure as exc:
                if self.policy == "fatal":
                    logger.error("Sink write failed, aborting crawl: %s", exc)
                    raise
                attempts += 1
                if attempts > self.retries:
                    logger.error("Sink write failed for %s: %s", page.url, exc.cause)
                    self.failures.append(exc)
                    return
                # exponential backoff, cap at 60s
                delay = min(self.backoff * 2 ** (attempts - 1), 60)
                logger.debug("Retry %d/%d storing %s after %.2f s", attempts, self.retries, page.url, delay)
                await asyncio.sleep(delay)

    async def close(self) -> None:
        try:
            await self.sink.close()
        except SinkWriteFailure as exc:
            if self.policy == "fatal":
                logger.error("Closing sink failed: %s", exc)
                raise
            logger.error("Closing sink failed: %s", exc.cause)
            self.failures.append(exc)
