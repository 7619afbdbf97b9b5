"""
HTTP client for the health feed.

One GET per call; the response body is returned as raw bytes together
with the content headers, which the decoder treats as hints only.
"""

from __future__ import annotations

import asyncio
from typing import Dict

import aiohttp

from statuscheck.errors import NetworkError
from statuscheck.models import FeedConfig, FeedPayload


class FeedClient:
    """
    Fetches the feed over a shared aiohttp session.

    Attributes:
        feed: Feed location and user agent.
        timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        feed: FeedConfig,
        timeout: float = 8.0,
    ) -> None:
        self._session = session
        self.feed = feed
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self.feed.user_agent,
            "Accept-Charset": "utf-8",
        }

    async def fetch(self) -> FeedPayload:
        """
        Perform one request.

        Raises:
            NetworkError: Connection failure, timeout, or non-2xx status.
        """
        try:
            async with self._session.get(
                self.feed.url,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise NetworkError(f"{self.feed.name} feed returned {resp.status}")
                body = await resp.read()
                return FeedPayload(
                    body=body,
                    content_type=resp.headers.get("Content-Type"),
                    content_encoding=resp.headers.get("Content-Encoding"),
                )
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"Request timed out after {self.timeout:g}s") from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
