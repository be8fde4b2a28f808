"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from pathlib import Path

from .app import TranscriptMonitorApp
from .exceptions import PersistenceError
from .models import NetworkOptions, RuntimeOptions


def main() -> None:
    parser = argparse.ArgumentParser(description="Collect notable chat transcript messages")
    parser.add_argument(
        "--data-path",
        default=os.getenv("TRANSCRIPT_MONITOR_DATA_PATH", "data"),
        help=("Каталог с настройками и состоянием. Можно передать через "
              "TRANSCRIPT_MONITOR_DATA_PATH"),
    )
    parser.add_argument(
        "--fetch-timeout", type=float, default=15.0, help="Таймаут загрузки страницы, сек"
    )
    parser.add_argument(
        "--max-pages", type=int, default=50, help="Максимум страниц за одно сканирование"
    )
    parser.add_argument("--user-agent", help="User-Agent для запросов к транскрипту")
    parser.add_argument(
        "--proxy-url",
        default=os.getenv("TRANSCRIPT_MONITOR_PROXY"),
        help="Прокси для запросов. Можно передать через TRANSCRIPT_MONITOR_PROXY",
    )
    parser.add_argument("--log-level", default="INFO", help="Уровень логирования")
    args = parser.parse_args()

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout должен быть положительным")
    if args.max_pages <= 0:
        parser.error("--max-pages должен быть положительным")

    runtime = RuntimeOptions(fetch_timeout=args.fetch_timeout, max_pages=args.max_pages)
    network = NetworkOptions(proxy_url=args.proxy_url, user_agent=args.user_agent)

    async def runner() -> None:
        app = TranscriptMonitorApp(
            data_path=Path(args.data_path), runtime=runtime, network=network
        )
        await app.run()

    try:
        asyncio.run(runner())
    except PersistenceError as exc:
        parser.exit(1, f"Не удалось загрузить данные: {exc}\n")
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Остановка по запросу пользователя")


if __name__ == "__main__":
    main()
