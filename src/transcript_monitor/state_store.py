"""JSON backed storage for scraper settings and scrape results."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from .deduplication import UsedMessageLedger
from .exceptions import MessageNotFoundError, PersistenceError, SettingsError
from .models import EPOCH, Message, ScrapeResult, ScrapeState, Settings
from .utils import format_timestamp, normalize_words, parse_timestamp

SETTINGS_FILENAME = "scraper_settings.json"
STATE_FILENAME = "scraper_data.json"

logger = logging.getLogger(__name__)


class JsonDocument:
    """A single JSON file that is always rewritten as a whole."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Mapping[str, Any] | None:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            raise PersistenceError(self._path, f"cannot read document: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise PersistenceError(self._path, "document must contain a JSON object")
        return payload

    def write(self, payload: Mapping[str, Any]) -> None:
        directory = self._path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as exc:
            raise PersistenceError(self._path, f"cannot write document: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise PersistenceError(self._path, f"cannot write document: {exc}") from exc


class SettingsStore:
    """Persisted polling settings guarded by their own lock."""

    def __init__(self, path: Path):
        self._document = JsonDocument(path)
        self._lock = asyncio.Lock()
        payload = self._document.read()
        if payload is None:
            self._settings = Settings()
        else:
            try:
                self._settings = settings_from_payload(payload)
            except SettingsError as exc:
                raise PersistenceError(self._document.path, str(exc)) from exc

    @property
    def path(self) -> Path:
        return self._document.path

    async def get(self) -> Settings:
        async with self._lock:
            return self._settings.copy()

    async def replace(self, settings: Settings) -> None:
        """Swap the whole settings record and persist it."""

        validated = validate_settings(settings)
        async with self._lock:
            self._document.write(settings_to_payload(validated))
            self._settings = validated


class ScrapeStateStore:
    """Persisted scrape results guarded by their own lock."""

    def __init__(self, path: Path):
        self._document = JsonDocument(path)
        self._lock = asyncio.Lock()
        payload = self._document.read()
        self._state = ScrapeState() if payload is None else state_from_payload(
            payload, self._document.path
        )

    @property
    def path(self) -> Path:
        return self._document.path

    async def snapshot(self) -> ScrapeState:
        async with self._lock:
            return self._state.copy()

    async def messages(self) -> list[Message]:
        async with self._lock:
            return list(self._state.messages)

    async def commit_scrape(self, result: ScrapeResult, finished_at: datetime) -> int:
        """Replace the candidates with ``result`` and prune the used ledger.

        Returns the number of used IDs dropped below the new low-water mark.
        Nothing changes in memory when the document cannot be written.
        """

        async with self._lock:
            ledger = UsedMessageLedger(self._state.messages_used)
            seen: set[int] = set()
            messages: list[Message] = []
            for message in result.messages:
                if message.id in seen or message.id in ledger:
                    continue
                seen.add(message.id)
                messages.append(message)
            pruned = ledger.prune_below(result.earliest_id)
            updated = ScrapeState(
                last_scrape=finished_at,
                earliest_id=result.earliest_id,
                messages=messages,
                messages_used=ledger.to_list(),
            )
            self._document.write(state_to_payload(updated))
            self._state = updated
        return pruned

    async def take(self, message_id: int) -> Message:
        """Remove a candidate and remember its ID as used."""

        async with self._lock:
            remaining: list[Message] = []
            taken: Message | None = None
            for message in self._state.messages:
                if taken is None and message.id == message_id:
                    taken = message
                    continue
                remaining.append(message)
            if taken is None:
                raise MessageNotFoundError(message_id)
            ledger = UsedMessageLedger(self._state.messages_used)
            ledger.add(taken.id)
            updated = ScrapeState(
                last_scrape=self._state.last_scrape,
                earliest_id=self._state.earliest_id,
                messages=remaining,
                messages_used=ledger.to_list(),
            )
            self._document.write(state_to_payload(updated))
            self._state = updated
        return taken


# ----------------------------------------------------------------------
# Serialization
# ----------------------------------------------------------------------
def validate_settings(settings: Settings) -> Settings:
    poll_url = str(settings.poll_url or "").strip().rstrip("/")
    if not poll_url:
        raise SettingsError("PollURL must not be empty")
    if settings.poll_frequency <= 0:
        raise SettingsError("PollFrequency must be a positive number of minutes")
    if settings.min_stars < 0:
        raise SettingsError("MinStars must not be negative")
    return Settings(
        poll_url=poll_url,
        poll_room_id=settings.poll_room_id,
        poll_frequency=settings.poll_frequency,
        min_stars=settings.min_stars,
        matching_words=normalize_words(settings.matching_words),
    )


def settings_to_payload(settings: Settings) -> dict[str, Any]:
    return {
        "PollURL": settings.poll_url,
        "PollRoomID": settings.poll_room_id,
        "PollFrequency": settings.poll_frequency,
        "MinStars": settings.min_stars,
        "MatchingWords": list(settings.matching_words),
    }


def settings_from_payload(payload: Mapping[str, Any]) -> Settings:
    defaults = Settings()
    words = payload.get("MatchingWords") or []
    if not isinstance(words, list):
        raise SettingsError("MatchingWords must be a list")
    return validate_settings(
        Settings(
            poll_url=str(payload.get("PollURL", defaults.poll_url)),
            poll_room_id=_int_field(payload, "PollRoomID", defaults.poll_room_id),
            poll_frequency=_int_field(payload, "PollFrequency", defaults.poll_frequency),
            min_stars=_int_field(payload, "MinStars", defaults.min_stars),
            matching_words=[str(word) for word in words],
        )
    )


def message_to_payload(message: Message) -> dict[str, Any]:
    return {
        "ID": message.id,
        "URL": message.url,
        "Body": message.body,
        "Author": message.author,
        "Stars": message.stars,
    }


def message_from_payload(payload: Mapping[str, Any]) -> Message:
    return Message(
        id=_int_field(payload, "ID", 0),
        url=str(payload.get("URL") or ""),
        body=str(payload.get("Body") or ""),
        author=str(payload.get("Author") or ""),
        stars=_int_field(payload, "Stars", 0),
    )


def state_to_payload(state: ScrapeState) -> dict[str, Any]:
    return {
        "LastScrape": format_timestamp(state.last_scrape),
        "EarliestID": state.earliest_id,
        "Messages": [message_to_payload(message) for message in state.messages],
        "MessagesUsed": list(state.messages_used),
    }


def state_from_payload(payload: Mapping[str, Any], path: Path) -> ScrapeState:
    raw_messages = payload.get("Messages") or []
    raw_used = payload.get("MessagesUsed") or []
    if not isinstance(raw_messages, list) or not isinstance(raw_used, list):
        raise PersistenceError(path, "Messages and MessagesUsed must be lists")
    try:
        messages = [
            message_from_payload(item) for item in raw_messages if isinstance(item, Mapping)
        ]
        used = UsedMessageLedger(int(item) for item in raw_used)
        earliest_id = _int_field(payload, "EarliestID", 0)
    except (SettingsError, TypeError, ValueError) as exc:
        raise PersistenceError(path, f"malformed scrape state: {exc}") from exc

    last_scrape_raw = payload.get("LastScrape")
    last_scrape = parse_timestamp(last_scrape_raw)
    if last_scrape is None:
        if last_scrape_raw:
            logger.warning(
                "Некорректное время последнего сканирования в %s: %r", path, last_scrape_raw
            )
        last_scrape = EPOCH

    return ScrapeState(
        last_scrape=last_scrape,
        earliest_id=earliest_id,
        messages=messages,
        messages_used=used.to_list(),
    )


def _int_field(payload: Mapping[str, Any], key: str, default: int) -> int:
    value = payload.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool):
        raise SettingsError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{key} must be an integer") from exc
