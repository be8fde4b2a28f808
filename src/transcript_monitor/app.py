"""Application bootstrap for Transcript Monitor."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp

from .models import NetworkOptions, RuntimeOptions
from .scraper import Scraper
from .state_store import SETTINGS_FILENAME, STATE_FILENAME, ScrapeStateStore, SettingsStore
from .transcript import TranscriptClient
from .walker import TranscriptWalker

logger = logging.getLogger(__name__)


class TranscriptMonitorApp:
    """High level coordinator tying together storage, transcript and scraper."""

    def __init__(
        self,
        *,
        data_path: Path,
        runtime: RuntimeOptions | None = None,
        network: NetworkOptions | None = None,
    ):
        self._data_path = data_path
        self._runtime = runtime or RuntimeOptions()
        self._network = network or NetworkOptions()
        self._data_path.mkdir(parents=True, exist_ok=True)
        self.settings_store = SettingsStore(self._data_path / SETTINGS_FILENAME)
        self.state_store = ScrapeStateStore(self._data_path / STATE_FILENAME)
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        async with aiohttp.ClientSession() as session:
            client = TranscriptClient(
                session,
                timeout=self._runtime.fetch_timeout,
                network=self._network,
            )
            scraper = Scraper(
                self.settings_store,
                self.state_store,
                TranscriptWalker(client, self._runtime),
            )
            scraper.start()
            settings = await scraper.settings()
            logger.info(
                "Сканер запущен для %s, интервал %d мин",
                settings.transcript_url,
                settings.poll_frequency,
            )
            try:
                await self._stop_event.wait()
            finally:
                await scraper.close()
