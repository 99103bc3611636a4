# spider_scout/crawler/link_extractor.py
"""
Link and phone-number extraction for SpiderScout.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from spider_scout.crawler.url_resolver import is_web_url, resolve, strip_fragment
from spider_scout.exceptions import ResolveError
from spider_scout.logger import logger

__all__ = ("extract_links", "match_phone_number")

_PHONE_RE = re.compile(r"^tel://(.+)$")

Document = Union[str, bytes, Iterable[str]]


def match_phone_number(value: str) -> Optional[str]:
    """Return *value* itself if it is a ``tel://`` link, else ``None``."""
    match = _PHONE_RE.match(value)
    return match.group(0) if match else None


def _read(document: Document) -> Union[str, bytes]:
    if isinstance(document, (str, bytes)):
        return document
    return "".join(document)


def _attr(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):  # multi-valued attributes come back as lists
        value = " ".join(value)
    return value.strip() if isinstance(value, str) else None


def _base_from_tag(document_url: str, raw: str) -> str:
    try:
        base = strip_fragment(resolve(document_url, raw))
    except ResolveError as exc:
        logger.warning("Invalid base tag on %s: %s", document_url, exc)
        return document_url
    if not is_web_url(base):
        logger.warning("Invalid base tag on %s: %r", document_url, raw)
        return document_url
    return base


def extract_links(document_url: str, document: Document) -> Tuple[List[str], List[str]]:
    """
    Collect absolute anchor targets and ``tel://`` references, in document order.

    *document* is the markup as a string or as the chunks it was received in.
    A ``<base href>`` inside ``<head>`` changes the base for every anchor after
    it.  Unresolvable hrefs are skipped; the extraction itself never fails, a
    broken document simply yields what was found.
    """
    soup = BeautifulSoup(_read(document), "html.parser")
    base_url = document_url
    links: List[str] = []
    phone_numbers: List[str] = []

    for tag in soup.find_all(["base", "a"]):
        if not isinstance(tag, Tag):
            continue
        href = _attr(tag, "href")
        if href is None:
            continue

        if tag.name == "base":
            if tag.find_parent("head") is not None:
                base_url = _base_from_tag(document_url, href)
            continue

        phone = match_phone_number(href)
        if phone is not None:
            phone_numbers.append(phone)
            continue

        try:
            absolute = resolve(base_url, href)
        except ResolveError as exc:
            logger.debug("Skipping link on %s: %s", document_url, exc)
            continue
        links.append(strip_fragment(absolute))

    return links, phone_numbers
