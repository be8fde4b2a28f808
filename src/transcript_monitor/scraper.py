"""Background scraper keeping the list of candidate messages fresh."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from .exceptions import ScraperClosedError
from .models import Message, Settings
from .state_store import ScrapeStateStore, SettingsStore
from .utils import utcnow
from .walker import TranscriptWalker

logger = logging.getLogger(__name__)

IDLE = "idle"
SCRAPING = "scraping"
STOPPED = "stopped"


class Scraper:
    """Regularly scrape the chat transcript for messages matching the settings.

    Matching messages become candidates until they are taken with :meth:`use`.
    The IDs of used messages are remembered so they are not offered again.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        state_store: ScrapeStateStore,
        walker: TranscriptWalker,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._settings = settings_store
        self._state = state_store
        self._walker = walker
        self._clock = clock
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self.state = IDLE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._closed:
            raise ScraperClosedError("scraper has been closed and cannot be restarted")
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run(), name="transcript-scraper")

    async def close(self) -> None:
        """Stop the loop and wait until it has exited."""

        self._closed = True
        self._stop_event.set()
        task = self._task
        if task is not None:
            await asyncio.shield(task)
        self.state = STOPPED

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            snapshot = await self._state.snapshot()
            settings = await self._settings.get()
            period = timedelta(minutes=settings.poll_frequency)
            diff = snapshot.last_scrape + period - self._clock()
            if diff <= timedelta(0):
                await self._scrape_safely()
                diff = period
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=diff.total_seconds())
            except asyncio.TimeoutError:
                continue
        logger.info("Сканер транскрипта остановлен")

    async def _scrape_safely(self) -> None:
        try:
            await self.scrape_once()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Ошибка при сканировании транскрипта")

    # ------------------------------------------------------------------
    # Scraping
    # ------------------------------------------------------------------
    async def scrape_once(self) -> None:
        """Walk the transcript and commit the result as one update."""

        settings = await self._settings.get()
        snapshot = await self._state.snapshot()
        self.state = SCRAPING
        try:
            result = await self._walker.walk(settings, snapshot.messages_used)
            pruned = await self._state.commit_scrape(result, self._clock())
        finally:
            self.state = STOPPED if self._closed else IDLE
        logger.info(
            "Сканирование завершено: %d страниц, %d кандидатов, удалено %d устаревших ID",
            len(result.pages),
            len(result.messages),
            pruned,
        )

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------
    async def messages(self) -> list[Message]:
        """Return a copy of the current candidates."""

        return await self._state.messages()

    async def use(self, message_id: int) -> Message:
        """Take a candidate so that future scrapes ignore it."""

        message = await self._state.take(message_id)
        logger.info("Сообщение %s отмечено как использованное", message_id)
        return message

    async def settings(self) -> Settings:
        return await self._settings.get()

    async def set_settings(self, settings: Settings) -> None:
        await self._settings.replace(settings)
        logger.info("Настройки сканера обновлены")
