import asyncio
import logging
import time
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup

from .config import Config
from .errors import FetchError

logger = logging.getLogger(__name__)


class RequestPacer:
    """Keeps a minimum delay between consecutive requests."""

    def __init__(self, min_delay: float):
        self.min_delay = min_delay
        self.last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        async with self._lock:
            elapsed = time.monotonic() - self.last_request_time
            if elapsed < self.min_delay:
                await asyncio.sleep(self.min_delay - elapsed)
            self.last_request_time = time.monotonic()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class DocumentFetcher:
    """Fetches forum pages over HTTP and parses them into a document tree.

    One fetcher is shared by every component that needs pages; pass it in
    rather than creating one per call. Use as an async context manager, or
    call :meth:`close` when done.
    """

    def __init__(self, config: Optional[Config] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or Config()
        self.timeout = aiohttp.ClientTimeout(
            total=self.config.request_timeout,
            connect=self.config.connect_timeout
        )
        self.headers = {
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }
        self.pacer = RequestPacer(self.config.request_delay)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> 'DocumentFetcher':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch(self, url: str) -> BeautifulSoup:
        """GET ``url`` and return the parsed document root.

        Raises FetchError on transport failure, timeout or a non-2xx status.
        """
        session = self._get_session()
        logger.debug(f"Fetching {url}")
        try:
            async with self.pacer:
                async with session.get(
                    url,
                    timeout=self.timeout,
                    headers=self.headers,
                    allow_redirects=True,
                    max_redirects=5
                ) as response:
                    if not 200 <= response.status < 300:
                        raise FetchError(f"HTTP {response.status} for {url}", url=url, status=response.status)
                    text = await response.text()
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout fetching {url}", url=url) from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Connection error fetching {url}: {e}", url=url) from e
        except UnicodeDecodeError as e:
            raise FetchError(f"Text decode error for {url}", url=url) from e

        return BeautifulSoup(text, 'html.parser')
