# spider_scout/crawler/models.py
"""
Data models for the SpiderScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple, Union


@dataclass(frozen=True, slots=True)
class CrawlJob:
    """One address waiting in the frontier. ``depth`` is informational only."""

    url: str
    depth: int = 0


@dataclass(frozen=True, slots=True)
class FetchedPage:
    """Raw body and extracted references of a successfully fetched page."""

    url: str
    content: str
    links: Tuple[str, ...] = ()
    phone_numbers: Tuple[str, ...] = ()

    def to_document(self) -> Dict[str, Any]:
        """Payload handed to result sinks."""
        return {
            "url": self.url,
            "content": self.content,
            "links": list(self.links),
            "phoneNumbers": list(self.phone_numbers),
        }


@dataclass(frozen=True, slots=True)
class CrawlError:
    """A failed fetch: the address and the underlying exception."""

    url: str
    error: BaseException

    @property
    def reason(self) -> str:
        return str(self.error) or type(self.error).__name__


CrawlOutcome = Union[FetchedPage, CrawlError]


@dataclass(slots=True)
class CrawlSummary:
    """What a finished crawl reached."""

    seed: str
    visited: FrozenSet[str] = frozenset()
    fetched: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def pages(self) -> int:
        return len(self.fetched)

    @property
    def errors(self) -> int:
        return len(self.failed)
