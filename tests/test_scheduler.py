# File: tests/test_scheduler.py
from __future__ import annotations

import asyncio

import pytest

from spider_scout.crawler.models import CrawlError, FetchedPage
from spider_scout.crawler.scheduler import CrawlScheduler, CrawlState
from spider_scout.exceptions import SinkWriteFailure
from spider_scout.sink import GuardedSink, MemorySink

ROOT = "http://example.com/"


def scheduler_for(fetcher, sink=None, **kwargs) -> CrawlScheduler:
    kwargs.setdefault("delay", 0)
    return CrawlScheduler(fetcher, sink if sink is not None else MemorySink(), **kwargs)


async def run(scheduler: CrawlScheduler, seed: str = ROOT):
    return await asyncio.wait_for(scheduler.run(seed), timeout=10)


@pytest.mark.asyncio()
async def test_cycle_is_fetched_once(graph_fetcher):
    a, b = "http://example.com/a", "http://example.com/b"
    fetcher = graph_fetcher({a: [b, a], b: [a, f"{a}#top"]})
    sink = MemorySink()
    scheduler = scheduler_for(fetcher, sink)

    summary = await run(scheduler, a)

    assert fetcher.calls == {a: 1, b: 1}
    assert summary.visited == {a, b}
    assert sorted(sink.urls) == [a, b]
    assert sink.closed
    assert scheduler.outstanding == 0
    assert scheduler.state is CrawlState.QUIESCENT


@pytest.mark.asyncio()
async def test_self_link_not_requeued(graph_fetcher):
    x = "http://example.com/x"
    fetcher = graph_fetcher({x: [x, x]})

    summary = await run(scheduler_for(fetcher), x)

    assert fetcher.calls[x] == 1
    assert summary.fetched == [x]


@pytest.mark.asyncio()
async def test_fragments_stripped_before_dedup(graph_fetcher):
    b = "http://example.com/b"
    fetcher = graph_fetcher({ROOT: [f"{b}#x", b, f"{b}#y"], b: []})

    summary = await run(scheduler_for(fetcher))

    assert fetcher.calls[b] == 1
    assert summary.visited == {ROOT, b}


@pytest.mark.asyncio()
async def test_only_web_links_followed(graph_fetcher):
    fetcher = graph_fetcher(
        {ROOT: ["mailto:info@example.com", "ftp://example.com/file", "javascript:void(0)"]}
    )

    summary = await run(scheduler_for(fetcher))

    assert list(fetcher.calls) == [ROOT]
    assert summary.visited == {ROOT}


@pytest.mark.asyncio()
async def test_wide_graph_does_not_block(graph_fetcher):
    children = [f"http://example.com/p{i}" for i in range(2000)]
    graph = {ROOT: children, **{c: [ROOT] for c in children}}
    fetcher = graph_fetcher(graph)

    summary = await run(scheduler_for(fetcher, workers=5))

    assert summary.pages == len(children) + 1
    assert len(summary.visited) == len(children) + 1
    assert max(fetcher.calls.values()) == 1


@pytest.mark.asyncio()
async def test_failed_fetch_is_counted_and_crawl_continues(graph_fetcher):
    dead = "http://dead.example/"
    alive = "http://example.com/alive"
    fetcher = graph_fetcher({ROOT: [dead, alive], alive: ["http://example.com/deeper"]})
    scheduler = scheduler_for(fetcher)

    summary = await run(scheduler)

    assert set(summary.failed) == {dead, "http://example.com/deeper"}
    assert "cannot connect" in summary.failed[dead]
    assert summary.fetched.count(alive) == 1
    assert fetcher.calls[dead] == 1
    assert scheduler.outstanding == 0


@pytest.mark.asyncio()
async def test_failed_seed_finishes_immediately(graph_fetcher):
    fetcher = graph_fetcher({})
    sink = MemorySink()

    summary = await run(scheduler_for(fetcher, sink), "http://dead.example/")

    assert summary.pages == 0
    assert summary.errors == 1
    assert sink.pages == []
    assert sink.closed


@pytest.mark.asyncio()
async def test_unexpected_fetch_exception_is_contained(graph_fetcher):
    class Exploding:
        def __init__(self):
            self.inner = graph_fetcher(
                {ROOT: ["http://example.com/boom", "http://example.com/ok"], "http://example.com/ok": []}
            )

        async def fetch(self, url):
            if url.endswith("/boom"):
                raise RuntimeError("parser exploded")
            return await self.inner.fetch(url)

    summary = await run(scheduler_for(Exploding()))

    assert summary.failed == {"http://example.com/boom": "parser exploded"}
    assert "http://example.com/ok" in summary.fetched


@pytest.mark.asyncio()
async def test_children_carry_depth(graph_fetcher):
    depths = {}

    class Recording(CrawlScheduler):
        def _enqueue(self, job):
            depths[job.url] = job.depth
            super()._enqueue(job)

    a, b = "http://example.com/a", "http://example.com/b"
    fetcher = graph_fetcher({ROOT: [a], a: [b], b: []})

    await run(Recording(fetcher, MemorySink(), delay=0))

    assert depths == {ROOT: 0, a: 1, b: 2}


@pytest.mark.asyncio()
async def test_stop_prevents_new_work(graph_fetcher):
    children = [f"http://example.com/c{i}" for i in range(50)]
    fetcher = graph_fetcher({ROOT: children, **{c: [] for c in children}})
    scheduler = scheduler_for(fetcher, workers=1)

    class Stopping:
        async def fetch(self, url):
            if url == children[0]:
                scheduler.stop()
            return await fetcher.fetch(url)

    scheduler.fetcher = Stopping()
    summary = await run(scheduler)

    assert summary.pages < len(children)
    assert scheduler.outstanding == 0
    assert scheduler.state is CrawlState.QUIESCENT


@pytest.mark.asyncio()
async def test_stop_before_links_are_scheduled(graph_fetcher):
    fetcher = graph_fetcher({ROOT: ["http://example.com/next"]})
    scheduler = scheduler_for(fetcher)

    class StopOnSeed:
        async def fetch(self, url):
            scheduler.stop()
            return await fetcher.fetch(url)

    scheduler.fetcher = StopOnSeed()
    summary = await run(scheduler)

    assert summary.fetched == [ROOT]
    assert summary.visited == {ROOT}


class BrokenSink:
    def __init__(self):
        self.closed = False

    async def write(self, page: FetchedPage) -> None:
        raise SinkWriteFailure(page.url, "index unavailable")

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio()
async def test_fatal_sink_failure_aborts_crawl(graph_fetcher):
    fetcher = graph_fetcher({ROOT: ["http://example.com/a"], "http://example.com/a": []})
    broken = BrokenSink()
    scheduler = scheduler_for(fetcher, GuardedSink(broken, "fatal"))

    with pytest.raises(SinkWriteFailure):
        await run(scheduler)

    assert broken.closed
    assert scheduler.state is CrawlState.ABORTED
    pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    assert not pending


@pytest.mark.asyncio()
async def test_logged_sink_failure_keeps_crawling(graph_fetcher):
    a = "http://example.com/a"
    fetcher = graph_fetcher({ROOT: [a], a: []})
    guarded = GuardedSink(BrokenSink(), "log")

    summary = await run(scheduler_for(fetcher, guarded))

    assert summary.fetched == [ROOT, a]
    assert [f.url for f in guarded.failures] == [ROOT, a]


def test_invalid_pool_settings(graph_fetcher):
    with pytest.raises(ValueError):
        CrawlScheduler(graph_fetcher({}), MemorySink(), workers=0)
    with pytest.raises(ValueError):
        CrawlScheduler(graph_fetcher({}), MemorySink(), delay=-1)


def test_crawl_error_reason_falls_back_to_type():
    assert CrawlError("http://example.com/", TimeoutError()).reason == "TimeoutError"


@pytest.mark.asyncio()
async def test_run_again_after_stop(graph_fetcher):
    a = "http://example.com/a"
    fetcher = graph_fetcher({ROOT: [a], a: []})
    scheduler = scheduler_for(fetcher)

    scheduler.stop()
    summary = await run(scheduler)

    assert sorted(summary.fetched) == [ROOT, a]
    assert scheduler.state is CrawlState.QUIESCENT


@pytest.mark.asyncio()
async def test_failing_close_marks_crawl_aborted(graph_fetcher):
    class UnclosableSink(MemorySink):
        async def close(self) -> None:
            raise SinkWriteFailure("report.json", "disk full")

    scheduler = scheduler_for(graph_fetcher({ROOT: []}), GuardedSink(UnclosableSink(), "fatal"))

    with pytest.raises(SinkWriteFailure):
        await run(scheduler)
    assert scheduler.state is CrawlState.ABORTED


def test_frontier_access_outside_crawl_raises(graph_fetcher):
    scheduler = scheduler_for(graph_fetcher({}))
    with pytest.raises(RuntimeError):
        scheduler._drain_frontier()
    assert scheduler.state is CrawlState.IDLE
