# spider_scout/exceptions.py
"""
Exception hierarchy for SpiderScout.
"""
from __future__ import annotations

__all__ = (
    "SpiderScoutError",
    "ResolveError",
    "MalformedReference",
    "MissingBase",
    "SinkWriteFailure",
    "InvalidSeed",
)


class SpiderScoutError(Exception):
    """Base class for all project errors."""


class ResolveError(SpiderScoutError):
    """A reference could not be turned into an absolute address."""


class MalformedReference(ResolveError):
    """The raw reference is not a parseable URL."""

    def __init__(self, ref: str, reason: str = "") -> None:
        self.ref = ref
        super().__init__(f"Malformed reference {ref!r}" + (f": {reason}" if reason else ""))


class MissingBase(ResolveError):
    """The base address has no scheme or no host."""

    def __init__(self, base: str) -> None:
        self.base = base
        super().__init__(f"Base URL has no scheme / host: {base!r}")


class SinkWriteFailure(SpiderScoutError):
    """Writing a fetched page to the result sink failed."""

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to store {url}: {cause}")


class InvalidSeed(SpiderScoutError):
    """The seed address cannot start a crawl."""
