from __future__ import annotations

import asyncio
import json
from pathlib import Path

from transcript_monitor.app import TranscriptMonitorApp
from transcript_monitor.models import RuntimeOptions


def test_app_creates_data_directory_and_stops_cleanly(tmp_path: Path) -> None:
    data_path = tmp_path / "data"

    async def runner() -> None:
        app = TranscriptMonitorApp(data_path=data_path, runtime=RuntimeOptions(max_pages=3))
        app.stop()
        await asyncio.wait_for(app.run(), timeout=5)

    asyncio.run(runner())

    assert data_path.is_dir()
    assert not (data_path / "scraper_data.json").exists()


def test_app_loads_existing_settings(tmp_path: Path) -> None:
    (tmp_path / "scraper_settings.json").write_text(
        json.dumps(
            {
                "PollURL": "https://chat.example.com",
                "PollRoomID": 9,
                "PollFrequency": 5,
                "MinStars": 1,
                "MatchingWords": ["ubuntu"],
            }
        ),
        encoding="utf-8",
    )

    async def runner() -> str:
        app = TranscriptMonitorApp(data_path=tmp_path)
        settings = await app.settings_store.get()
        return settings.transcript_url

    assert asyncio.run(runner()) == "https://chat.example.com/transcript/9"
