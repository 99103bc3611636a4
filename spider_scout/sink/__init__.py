# File: spider_scout/sink/__init__.py
"""spider_scout.sink: destinations for fetched pages, chosen from the crawler config."""

from __future__ import annotations

from aiohttp import ClientSession

from spider_scout.config import CrawlerConfig
from spider_scout.sink.base import GuardedSink, MemorySink, NullSink, ResultSink
from spider_scout.sink.http_sink import HttpUpsertSink
from spider_scout.sink.json_sink import JsonReportSink


def build_sink(config: CrawlerConfig, session: ClientSession) -> GuardedSink:
    """Create the configured sink wrapped in its failure policy."""
    inner: ResultSink
    if config.sink == "http":
        inner = HttpUpsertSink(session, config.sink_endpoint)
    elif config.sink == "json":
        inner = JsonReportSink(config.report_path, include_content=config.report_content)
    else:
        inner = NullSink()
    return GuardedSink(inner, config.sink_policy, retries=config.sink_retries)


__all__ = [
    "ResultSink",
    "NullSink",
    "MemorySink",
    "GuardedSink",
    "HttpUpsertSink",
    "JsonReportSink",
    "build_sink",
]
