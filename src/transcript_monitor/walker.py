"""Traversal of the transcript's chain of previous pages."""

from __future__ import annotations

import logging
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from .models import RuntimeOptions, ScrapeResult, Settings
from .scanner import ScanCriteria, scan_page
from .transcript import DocumentSource
from .utils import absolute_url

logger = logging.getLogger(__name__)


def initial_link(document: BeautifulSoup) -> str | None:
    """Return the first "previous page" link of the transcript root page."""

    anchor = document.select_one("a[rel=prev]")
    return _href(anchor)


def next_link(document: BeautifulSoup) -> str | None:
    """Pick the link to follow from a page reached through the chain.

    Pages split by hour render a pager whose ``.current`` marker is followed
    by the next page. Without that marker the link right after the "previous
    page" anchor is used instead.
    """

    for marker in document.select(".pager .current"):
        link = _href(_next_anchor(marker))
        if link:
            return link
    for marker in document.select("a[rel=prev]"):
        link = _href(_next_anchor(marker))
        if link:
            return link
    return None


class TranscriptWalker:
    """Fetch the transcript pages of a room and scan each of them."""

    def __init__(self, source: DocumentSource, runtime: RuntimeOptions | None = None):
        self._source = source
        self._runtime = runtime or RuntimeOptions()

    async def walk(self, settings: Settings, messages_used: Iterable[int]) -> ScrapeResult:
        """Run a full walk. Any :class:`FetchError` aborts the whole walk."""

        criteria = ScanCriteria.from_settings(settings, messages_used)
        max_pages = max(1, self._runtime.max_pages)
        result = ScrapeResult()

        root_url = settings.transcript_url
        document = await self._source.fetch(root_url)
        self._collect(result, root_url, document, criteria)
        link = initial_link(document)

        visited = {root_url}
        while link:
            url = absolute_url(settings.poll_url, link)
            if url in visited:
                logger.warning("Цепочка страниц транскрипта зациклилась на %s", url)
                break
            if len(result.pages) >= max_pages:
                logger.warning(
                    "Достигнут предел в %d страниц транскрипта, обход остановлен", max_pages
                )
                break
            visited.add(url)
            document = await self._source.fetch(url)
            self._collect(result, url, document, criteria)
            link = next_link(document)

        logger.debug(
            "Обход транскрипта завершён: %d страниц, %d кандидатов",
            len(result.pages),
            len(result.messages),
        )
        return result

    @staticmethod
    def _collect(
        result: ScrapeResult, url: str, document: BeautifulSoup, criteria: ScanCriteria
    ) -> None:
        scan = scan_page(document, criteria)
        # Low-water mark: the oldest first-message ID of any page in this walk.
        if scan.earliest_id and (
            result.earliest_id == 0 or scan.earliest_id < result.earliest_id
        ):
            result.earliest_id = scan.earliest_id
        result.messages.extend(scan.messages)
        result.pages.append(url)


def _next_anchor(marker: Tag) -> Tag | None:
    sibling = marker.find_next_sibling()
    if isinstance(sibling, Tag) and sibling.name == "a":
        return sibling
    return None


def _href(anchor: Tag | None) -> str | None:
    if anchor is None:
        return None
    href = str(anchor.get("href") or "").strip()
    return href or None
