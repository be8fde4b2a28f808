"""Chat transcript page source."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp
from bs4 import BeautifulSoup

from .exceptions import FetchError
from .models import NetworkOptions

_DEFAULT_USER_AGENT = "TranscriptMonitor/1.0 (+https://github.com)"
_HTML_PARSER = "lxml"

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    async def fetch(self, url: str) -> BeautifulSoup:
        """Return the parsed page at ``url`` or raise :class:`FetchError`."""


def parse_document(markup: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(markup, _HTML_PARSER)


class TranscriptClient:
    """Thin asynchronous wrapper fetching and parsing transcript pages."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        timeout: float = 15.0,
        network: NetworkOptions | None = None,
    ):
        self._session = session
        self._timeout = timeout
        self._network = network or NetworkOptions()

    async def fetch(self, url: str) -> BeautifulSoup:
        headers = {
            "User-Agent": self._network.user_agent or _DEFAULT_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml",
        }
        timeout_cfg = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with self._session.get(
                url,
                headers=headers,
                proxy=self._network.proxy_url,
                proxy_auth=self._build_proxy_auth(),
                timeout=timeout_cfg,
            ) as resp:
                if resp.status >= 400:
                    logger.warning(
                        "Транскрипт ответил статусом %s для страницы %s", resp.status, url
                    )
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                markup = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Не удалось загрузить страницу транскрипта %s: %s", url, exc)
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        return parse_document(markup)

    def _build_proxy_auth(self) -> aiohttp.BasicAuth | None:
        login = self._network.proxy_login
        if login:
            return aiohttp.BasicAuth(login, self._network.proxy_password or "")
        return None
