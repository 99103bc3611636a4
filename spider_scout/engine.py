# File: spider_scout/engine.py
"""spider_scout.engine: wiring of one crawl (HTTP session, fetcher, sink, scheduler)."""

from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientSession, ClientTimeout

from spider_scout.config import CrawlerConfig, parse_seed
from spider_scout.crawler.fetcher import PageFetcher
from spider_scout.crawler.models import CrawlSummary
from spider_scout.crawler.scheduler import CrawlScheduler
from spider_scout.logger import logger
from spider_scout.sink import GuardedSink, ResultSink, build_sink

__all__ = ["start_crawl"]


async def start_crawl(
    seed: str,
    config: CrawlerConfig,
    sink: Optional[ResultSink] = None,
    *,
    crawl_timeout: Optional[float] = None,
) -> CrawlSummary:
    """
    Crawl from *seed* with a fresh session and return the summary.

    Parameters
    ----------
    seed : str
        Start address, validated with :func:`parse_seed`.
    config : CrawlerConfig
        Crawl settings.
    sink : ResultSink, optional
        Page destination; by default built from ``config`` and wrapped in the
        configured failure policy.
    crawl_timeout : float, optional
        After this many seconds no new pages are queued and the crawl winds
        down once in-flight fetches finish.
    """
    seed = parse_seed(seed)
    timeout = ClientTimeout(total=config.timeout)
    async with ClientSession(
        timeout=timeout,
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    ) as session:
        result_sink = sink if sink is not None else build_sink(config, session)
        scheduler = CrawlScheduler(
            PageFetcher(session, config),
            result_sink,
            workers=config.workers,
            delay=config.delay,
        )
        deadline = None
        if crawl_timeout:
            deadline = asyncio.get_running_loop().call_later(crawl_timeout, scheduler.stop)
        try:
            summary = await scheduler.run(seed)
        finally:
            if deadline is not None:
                deadline.cancel()

    if isinstance(result_sink, GuardedSink) and result_sink.failures:
        logger.warning("%d sink write(s) failed", len(result_sink.failures))
    return summary

