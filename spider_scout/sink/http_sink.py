# spider_scout/sink/http_sink.py
"""
Upsert of fetched pages into an HTTP document store (Elasticsearch style).
"""
from __future__ import annotations

import asyncio
from urllib.parse import quote

from aiohttp import ClientError, ClientSession

from spider_scout.crawler.models import FetchedPage
from spider_scout.exceptions import SinkWriteFailure
from spider_scout.logger import logger

DEFAULT_ENDPOINT = "http://localhost:9200/text/article"


class HttpUpsertSink:
    """PUTs each page as JSON to ``{endpoint}/{escaped page url}``.

    The session is borrowed; closing the sink does not close it.
    """

    def __init__(self, session: ClientSession, endpoint: str = DEFAULT_ENDPOINT) -> None:
        self.session = session
        self.endpoint = endpoint.rstrip("/")

    def document_url(self, page_url: str) -> str:
        return f"{self.endpoint}/{quote(page_url, safe='')}"

    async def write(self, page: FetchedPage) -> None:
        target = self.document_url(page.url)
        try:
            async with self.session.put(target, json=page.to_document()) as resp:
                logger.debug("Stored %s -> HTTP %d", page.url, resp.status)
                if resp.status >= 400:
                    body = await resp.text(errors="replace")
                    raise SinkWriteFailure(page.url, f"HTTP {resp.status}: {body[:200]}")
        except (ClientError, asyncio.TimeoutError) as exc:
            raise SinkWriteFailure(page.url, exc) from exc

    async def close(self) -> None:
        return None
