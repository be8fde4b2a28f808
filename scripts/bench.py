"""Simple benchmark of page scanning and full transcript walks."""

from __future__ import annotations

import asyncio
import statistics
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from transcript_monitor.models import Settings as SettingsType

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC = PROJECT_ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_BASE_URL = "https://chat.example.com"
_PAGES = 6


def _sample_settings() -> "SettingsType":
    from transcript_monitor.models import Settings

    return Settings(
        poll_url=_BASE_URL,
        poll_room_id=1,
        poll_frequency=60,
        min_stars=3,
        matching_words=["ubuntu", "kernel", "grub"],
    )


def _sample_page(first_id: int, count: int, *, next_link: str | None = None) -> str:
    blocks = []
    for offset in range(count):
        message_id = first_id + offset
        stars = offset % 5
        body = "talking about ubuntu" if offset % 7 == 0 else "just chatting " * 4
        blocks.append(
            '<div class="monologue"><div class="signature"><div class="username">Bench</div>'
            '</div><div class="messages">'
            f'<div class="message"><a name="{message_id}" href="/transcript/message/{message_id}"></a>'
            f'<div class="content">{body}</div>'
            f'<span class="stars"><span class="times">{stars}</span></span></div>'
            "</div></div>"
        )
    pager = ""
    if next_link:
        pager = f'<div class="pager"><span class="current">1</span><a href="{next_link}">2</a></div>'
    return f"<html><body>{pager}{''.join(blocks)}</body></html>"


class _CannedSource:
    def __init__(self, pages: dict[str, str]) -> None:
        from transcript_monitor.transcript import parse_document

        self._documents = {url: parse_document(markup) for url, markup in pages.items()}

    async def fetch(self, url: str) -> "BeautifulSoup":
        return self._documents[url]


def _sample_chain(per_page: int) -> dict[str, str]:
    pages: dict[str, str] = {}
    root = f"{_BASE_URL}/transcript/1"
    pages[root] = _sample_page(10_000, per_page).replace(
        "<body>", '<body><a rel="prev" href="/transcript/1/p1">prev</a>', 1
    )
    for index in range(1, _PAGES):
        link = f"/transcript/1/p{index + 1}" if index + 1 < _PAGES else None
        pages[f"{_BASE_URL}/transcript/1/p{index}"] = _sample_page(
            index * per_page, per_page, next_link=link
        )
    return pages


def _time(callable_obj: Callable[[], None], iterations: int) -> float:
    start = time.perf_counter()
    for _ in range(iterations):
        callable_obj()
    return time.perf_counter() - start


def benchmark_scan(iterations: int, per_page: int = 200) -> None:
    from transcript_monitor.scanner import ScanCriteria, scan_page
    from transcript_monitor.transcript import parse_document

    criteria = ScanCriteria.from_settings(_sample_settings(), range(0, per_page, 3))
    document = parse_document(_sample_page(1, per_page))

    for _ in range(iterations):
        scan_page(document, criteria)


async def benchmark_walk(iterations: int, per_page: int = 200) -> None:
    from transcript_monitor.walker import TranscriptWalker

    walker = TranscriptWalker(_CannedSource(_sample_chain(per_page)))
    settings = _sample_settings()

    for _ in range(iterations):
        await walker.walk(settings, range(0, per_page * _PAGES, 5))


def main() -> None:
    iterations = 50

    def run_scan() -> None:
        benchmark_scan(1)

    def run_walk() -> None:
        asyncio.run(benchmark_walk(1))

    scan_times = [_time(run_scan, iterations) for _ in range(5)]
    walk_times = [_time(run_walk, iterations // 5) for _ in range(5)]

    print("Benchmark results (smaller is better)")
    print("Iterations per batch:", iterations)
    print()
    print(f"Scan average:   {statistics.mean(scan_times):.4f}s")
    print(f"Scan stdev:     {statistics.pstdev(scan_times):.4f}s")
    print(f"Walk average:   {statistics.mean(walk_times):.4f}s")
    print(f"Walk stdev:     {statistics.pstdev(walk_times):.4f}s")


if __name__ == "__main__":
    main()
