"""Miscellaneous helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable
from urllib.parse import urljoin, urlsplit


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_positive_int(value: object) -> int:
    """Return ``value`` as a positive integer or ``0`` when it is not one."""

    if value is None:
        return 0
    text = str(value).strip()
    if not text.isdigit():
        return 0
    return int(text)


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_words(words: Iterable[str]) -> list[str]:
    """Drop empty matching words; the others are kept verbatim and in order."""

    return [text for text in (str(word) for word in words) if text]


def absolute_url(base_url: str, link: str) -> str:
    """Resolve ``link`` found on a transcript page against ``base_url``."""

    link = link.strip()
    if urlsplit(link).scheme:
        return link
    if link.startswith("/"):
        return f"{base_url.rstrip('/')}{link}"
    return urljoin(base_url.rstrip("/") + "/", link)
