"""Data models used across the transcript monitor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Sequence

EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)

DEFAULT_POLL_URL = "https://chat.stackexchange.com"
DEFAULT_POLL_ROOM_ID = 201


@dataclass(slots=True, frozen=True)
class Message:
    """Candidate chat message extracted from the transcript."""

    id: int
    url: str
    body: str
    author: str
    stars: int = 0


@dataclass(slots=True)
class Settings:
    """Polling configuration of the scraper."""

    poll_url: str = DEFAULT_POLL_URL
    poll_room_id: int = DEFAULT_POLL_ROOM_ID
    poll_frequency: int = 60
    min_stars: int = 3
    matching_words: list[str] = field(default_factory=list)

    def copy(self) -> "Settings":
        return replace(self, matching_words=list(self.matching_words))

    @property
    def transcript_url(self) -> str:
        return f"{self.poll_url}/transcript/{self.poll_room_id}"


@dataclass(slots=True)
class ScrapeState:
    """Results of the latest scrape plus the history of used messages."""

    last_scrape: datetime = EPOCH
    earliest_id: int = 0
    messages: list[Message] = field(default_factory=list)
    messages_used: list[int] = field(default_factory=list)

    def copy(self) -> "ScrapeState":
        return ScrapeState(
            last_scrape=self.last_scrape,
            earliest_id=self.earliest_id,
            messages=list(self.messages),
            messages_used=list(self.messages_used),
        )


@dataclass(slots=True)
class NetworkOptions:
    """Proxy and client identity overrides."""

    proxy_url: str | None = None
    proxy_login: str | None = None
    proxy_password: str | None = None
    user_agent: str | None = None


@dataclass(slots=True)
class RuntimeOptions:
    """Tunable behaviour of the scraper loop."""

    fetch_timeout: float = 15.0
    max_pages: int = 50


@dataclass(slots=True, frozen=True)
class PageScan:
    """Output of scanning a single transcript page."""

    earliest_id: int
    messages: Sequence[Message]


@dataclass(slots=True)
class ScrapeResult:
    """Aggregated output of a full walk over the transcript pages."""

    earliest_id: int = 0
    messages: list[Message] = field(default_factory=list)
    pages: list[str] = field(default_factory=list)
