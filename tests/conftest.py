# File: tests/conftest.py
import asyncio
from collections import Counter
from typing import Dict, Iterable, Union

import pytest
import pytest_asyncio
from aiohttp import web

from spider_scout.config import CrawlerConfig
from spider_scout.crawler.models import CrawlError, FetchedPage


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """
    Config for tests against local servers: no per-worker delay, short timeout.
    """
    return CrawlerConfig(workers=5, delay=0.0, timeout=2.0, user_agent="TestAgent/1.0")


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory):
    """
    Start aiohttp applications on free ports; yields ``start(app) -> base url``.
    All servers are cleaned up after the test.
    """
    runners = []

    async def start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield start

    for runner in runners:
        await runner.cleanup()


def make_site(pages: Dict[str, str], hits: Counter) -> web.Application:
    """
    Build an app serving ``pages`` (path -> html) and counting hits per path.
    """
    app = web.Application()

    def handler_for(path: str, html: str):
        async def handle(_):
            hits[path] += 1
            return web.Response(text=html, content_type="text/html")
        return handle

    for path, html in pages.items():
        app.router.add_get(path, handler_for(path, html))
    return app


@pytest.fixture()
def site_factory():
    return make_site


class GraphFetcher:
    """
    In-memory fetcher: url -> outgoing links, or an exception to report.
    Unknown urls fail like an unreachable host.
    """

    def __init__(self, graph: Dict[str, Union[Iterable[str], Exception]]) -> None:
        self.graph = graph
        self.calls: Counter = Counter()

    async def fetch(self, url: str):
        self.calls[url] += 1
        await asyncio.sleep(0)
        node = self.graph.get(url)
        if node is None:
            return CrawlError(url, ConnectionError(f"cannot connect to {url}"))
        if isinstance(node, Exception):
            return CrawlError(url, node)
        return FetchedPage(url=url, content=f"<html>{url}</html>", links=tuple(node))


@pytest.fixture()
def graph_fetcher():
    return GraphFetcher
