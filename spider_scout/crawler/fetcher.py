# spider_scout/crawler/fetcher.py
"""
Fetcher module: one GET per address, body captured and scanned for links.
"""
from __future__ import annotations

import asyncio
import codecs
from typing import List

from aiohttp import ClientError, ClientSession, ClientTimeout

from spider_scout.config import CrawlerConfig
from spider_scout.crawler.link_extractor import extract_links
from spider_scout.crawler.models import CrawlError, CrawlOutcome, FetchedPage
from spider_scout.logger import logger

_CHUNK_SIZE = 64 * 1024


def _decoder_for(charset: str | None) -> codecs.IncrementalDecoder:
    try:
        factory = codecs.getincrementaldecoder(charset or "utf-8")
    except LookupError:
        factory = codecs.getincrementaldecoder("utf-8")
    return factory(errors="replace")


class PageFetcher:
    """Loads pages over a shared aiohttp session.

    Every response status is accepted as a page. Each request is bounded by
    ``config.timeout`` whatever the session default is. There is no retry: a
    transport failure or timeout is reported once as :class:`CrawlError`.
    """

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config
        self._timeout = ClientTimeout(total=config.timeout)

    async def fetch(self, url: str) -> CrawlOutcome:
        """Fetch *url* and return a FetchedPage, or a CrawlError on failure."""
        try:
            async with self.session.get(url, raise_for_status=False, timeout=self._timeout) as resp:
                logger.info("Loaded page %s (HTTP %d)", url, resp.status)
                decoder = _decoder_for(resp.charset)
                chunks: List[str] = []
                async for raw in resp.content.iter_chunked(_CHUNK_SIZE):
                    chunks.append(decoder.decode(raw))
                chunks.append(decoder.decode(b"", final=True))
        except (ClientError, asyncio.TimeoutError) as exc:
            return CrawlError(url, exc)

        links, phone_numbers = extract_links(url, chunks)
        logger.debug("Extracted %d links from %s", len(links), url)
        return FetchedPage(
            url=url,
            content="".join(chunks),
            links=tuple(links),
            phone_numbers=tuple(phone_numbers),
        )
