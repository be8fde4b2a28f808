"""Extraction of candidate messages from a single transcript page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from .matching import CandidateFilter
from .models import Message, PageScan, Settings
from .utils import absolute_url, parse_positive_int

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanCriteria:
    """Snapshot of the settings and history a page is scanned against."""

    poll_url: str
    min_stars: int
    matching_words: list[str] = field(default_factory=list)
    messages_used: set[int] = field(default_factory=set)

    @classmethod
    def from_settings(cls, settings: Settings, messages_used: Iterable[int]) -> "ScanCriteria":
        return cls(
            poll_url=settings.poll_url,
            min_stars=settings.min_stars,
            matching_words=list(settings.matching_words),
            messages_used=set(messages_used),
        )


def scan_page(document: BeautifulSoup | Tag, criteria: ScanCriteria) -> PageScan:
    """Collect qualifying messages from ``document`` in document order.

    ``earliest_id`` is the ID of the first message block on the page, or 0
    when the page holds none.
    """

    engine = CandidateFilter(
        min_stars=criteria.min_stars,
        matching_words=criteria.matching_words,
        messages_used=criteria.messages_used,
    )
    earliest_id = 0
    messages: list[Message] = []
    for block in document.select(".message"):
        anchor = block.select_one("a[name]")
        if anchor is None:
            continue
        message_id = parse_positive_int(anchor.get("name"))
        if message_id == 0:
            continue
        if earliest_id == 0:
            earliest_id = message_id

        body = _text(block.select_one(".content"))
        stars = parse_positive_int(_text(block.select_one(".stars .times")))
        decision = engine.evaluate(message_id, body, stars)
        if not decision.allowed:
            logger.debug("Сообщение %s пропущено: %s", message_id, decision.reason)
            continue
        messages.append(
            Message(
                id=message_id,
                url=absolute_url(criteria.poll_url, str(anchor.get("href") or "")),
                body=body,
                author=_author(block),
                stars=stars,
            )
        )
    return PageScan(earliest_id=earliest_id, messages=messages)


def _author(block: Tag) -> str:
    monologue = block.find_parent(class_="monologue") or block.parent
    if monologue is None:
        return ""
    return _text(monologue.select_one(".signature .username"))


def _text(element: Tag | None) -> str:
    if element is None:
        return ""
    return element.get_text().strip()
