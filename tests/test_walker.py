from __future__ import annotations

import asyncio

import pytest
from html_fixtures import FakeSource, message_block, monologue, page

from transcript_monitor.exceptions import FetchError
from transcript_monitor.models import RuntimeOptions, Settings
from transcript_monitor.transcript import parse_document
from transcript_monitor.walker import TranscriptWalker, initial_link, next_link

BASE = "https://chat.example.com"
ROOT = f"{BASE}/transcript/201"
DAY_FIRST = "/transcript/201/2024/1/1/0-12"
DAY_SECOND = "/transcript/201/2024/1/1/12-24"


def make_settings(**kwargs: object) -> Settings:
    return Settings(
        poll_url=BASE,
        poll_room_id=201,
        poll_frequency=60,
        min_stars=int(kwargs.get("min_stars", 3)),  # type: ignore[arg-type]
        matching_words=list(kwargs.get("matching_words", ["ubuntu"])),  # type: ignore[arg-type]
    )


def three_page_source() -> FakeSource:
    return FakeSource(
        {
            ROOT: page(
                monologue("root", message_block(300, "ubuntu root"), message_block(301, "x")),
                prev=DAY_FIRST,
            ),
            f"{BASE}{DAY_FIRST}": page(
                monologue("first", message_block(100, "ubuntu first", stars=1)),
                pager=[None, DAY_SECOND],
            ),
            f"{BASE}{DAY_SECOND}": page(
                monologue("second", message_block(200, "starred", stars=7)),
                pager=[DAY_FIRST, None],
            ),
        }
    )


def test_walk_visits_every_page_in_chain() -> None:
    source = three_page_source()
    walker = TranscriptWalker(source)

    result = asyncio.run(walker.walk(make_settings(), []))

    assert source.fetched == [ROOT, f"{BASE}{DAY_FIRST}", f"{BASE}{DAY_SECOND}"]
    assert result.pages == source.fetched
    assert [message.id for message in result.messages] == [300, 100, 200]
    assert result.earliest_id == 100


def test_walk_takes_oldest_page_as_low_water_mark() -> None:
    source = three_page_source()
    source.pages[ROOT] = page(prev=DAY_FIRST)

    result = asyncio.run(TranscriptWalker(source).walk(make_settings(), []))

    assert result.earliest_id == 100


def test_walk_single_page_without_previous_link() -> None:
    source = FakeSource({ROOT: page(monologue("a", message_block(5, "ubuntu")))})

    result = asyncio.run(TranscriptWalker(source).walk(make_settings(), []))

    assert source.fetched == [ROOT]
    assert [message.id for message in result.messages] == [5]


def test_walk_excludes_used_messages() -> None:
    result = asyncio.run(TranscriptWalker(three_page_source()).walk(make_settings(), [100, 300]))

    assert [message.id for message in result.messages] == [200]


def test_walk_aborts_when_root_fetch_fails() -> None:
    source = FakeSource({})

    with pytest.raises(FetchError):
        asyncio.run(TranscriptWalker(source).walk(make_settings(), []))


def test_walk_aborts_when_previous_page_fails() -> None:
    source = three_page_source()
    del source.pages[f"{BASE}{DAY_SECOND}"]

    with pytest.raises(FetchError) as info:
        asyncio.run(TranscriptWalker(source).walk(make_settings(), []))

    assert info.value.url == f"{BASE}{DAY_SECOND}"


def test_walk_stops_at_page_limit() -> None:
    source = three_page_source()
    walker = TranscriptWalker(source, RuntimeOptions(max_pages=2))

    result = asyncio.run(walker.walk(make_settings(), []))

    assert len(source.fetched) == 2
    assert [message.id for message in result.messages] == [300, 100]


def test_walk_stops_when_chain_loops() -> None:
    loop_a = "/transcript/201/a"
    loop_b = "/transcript/201/b"
    source = FakeSource(
        {
            ROOT: page(prev=loop_a),
            f"{BASE}{loop_a}": page(monologue("a", message_block(1, "ubuntu")), pager=[None, loop_b]),
            f"{BASE}{loop_b}": page(monologue("b", message_block(2, "ubuntu")), pager=[None, loop_a]),
        }
    )

    result = asyncio.run(TranscriptWalker(source).walk(make_settings(), []))

    assert source.fetched == [ROOT, f"{BASE}{loop_a}", f"{BASE}{loop_b}"]
    assert [message.id for message in result.messages] == [1, 2]


def test_next_link_prefers_pager_over_previous_marker() -> None:
    document = parse_document(page(prev="/prev", after_prev="/after", pager=[None, "/hour"]))

    assert next_link(document) == "/hour"


def test_next_link_falls_back_to_link_after_previous_marker() -> None:
    document = parse_document(page(prev="/prev", after_prev="/after"))

    assert next_link(document) == "/after"
    assert initial_link(document) == "/prev"


def test_next_link_missing_when_chain_ends() -> None:
    assert next_link(parse_document(page(pager=["/one", None]))) is None
    assert next_link(parse_document(page(prev="/prev"))) is None
    assert initial_link(parse_document(page())) is None
