"""Errors raised by the transcript monitor."""

from __future__ import annotations

from pathlib import Path


class TranscriptMonitorError(Exception):
    """Base class for all monitor errors."""


class FetchError(TranscriptMonitorError):
    """A transcript page could not be fetched or parsed."""

    def __init__(self, url: str, message: str, status: int | None = None):
        self.url = url
        self.status = status
        super().__init__(f"Failed to fetch {url}: {message}")


class PersistenceError(TranscriptMonitorError):
    """A JSON document could not be read or written."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class SettingsError(TranscriptMonitorError, ValueError):
    """Settings contain values the scraper cannot work with."""


class MessageNotFoundError(TranscriptMonitorError, KeyError):
    """The requested message is not among the current candidates."""

    def __init__(self, message_id: int):
        self.message_id = message_id
        super().__init__(f"Invalid message ID {message_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class ScraperClosedError(TranscriptMonitorError, RuntimeError):
    """The scraper was used after it had been shut down."""


class RandomnessError(TranscriptMonitorError):
    """The system entropy source failed."""
