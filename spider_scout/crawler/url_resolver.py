# spider_scout/crawler/url_resolver.py
"""
Turning raw (possibly relative) references into absolute addresses.

:func:`resolve` merges a reference with the address of the document it was
found in.  Components present in the reference win; missing ones are taken
from the base.  References with a non-network scheme (``mailto:``,
``javascript:`` ...) are returned untouched so callers can filter them with
:func:`is_web_url`.
"""
from __future__ import annotations

from typing import Final, FrozenSet, List
from urllib.parse import urldefrag, urlsplit, urlunsplit

from spider_scout.exceptions import MalformedReference, MissingBase

__all__ = ("resolve", "strip_fragment", "is_web_url")

NETWORK_SCHEMES: Final[FrozenSet[str]] = frozenset({"http", "https", "ftp"})
WEB_SCHEMES: Final[FrozenSet[str]] = frozenset({"http", "https"})


def _collapse_dot_segments(path: str) -> str:
    """Remove ``.`` and ``..`` segments (RFC 3986, 5.2.4); empty segments stay."""
    segments: List[str] = []
    parts = (path[1:] if path.startswith("/") else path).split("/")
    for segment in parts:
        if segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    # a final dot segment still names a directory
    if parts[-1] in (".", ".."):
        segments.append("")
    return "/" + "/".join(segments)


def resolve(base: str, ref: str) -> str:
    """Resolve *ref* against *base* and return an absolute URL.

    Raises
    ------
    MissingBase
        *base* has no scheme or no host.
    MalformedReference
        *ref* cannot be parsed as a URL.
    """
    try:
        base_parts = urlsplit(base)
    except ValueError:
        raise MissingBase(base) from None
    if not base_parts.scheme or not base_parts.netloc:
        raise MissingBase(base)

    try:
        parts = urlsplit(ref)
        parts.port  # validates the port component
    except ValueError as exc:
        raise MalformedReference(ref, str(exc)) from exc

    scheme = parts.scheme
    if not scheme:
        scheme = base_parts.scheme
    elif scheme not in NETWORK_SCHEMES:
        return ref

    netloc = parts.netloc or base_parts.netloc

    path = parts.path
    if not path:
        path = base_parts.path or "/"
    elif not path.startswith("/"):
        directory = base_parts.path[: base_parts.path.rfind("/") + 1]
        path = directory + path

    return urlunsplit((scheme, netloc, _collapse_dot_segments(path), parts.query, parts.fragment))


def strip_fragment(url: str) -> str:
    """Return *url* without its ``#fragment``."""
    return urldefrag(url).url


def is_web_url(url: str) -> bool:
    """True for http(s) addresses, the only ones the crawler follows."""
    try:
        return urlsplit(url).scheme in WEB_SCHEMES
    except ValueError:
        return False
