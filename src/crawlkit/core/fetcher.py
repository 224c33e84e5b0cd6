"""HTTP fetcher implementation using httpx."""

import asyncio
import time

import httpx

from ..errors import FetchError
from .protocols import Response

DEFAULT_USER_AGENT = "crawlkit/0.1 (+https://github.com/crawlkit)"


class HttpFetcher:
    """Async HTTP fetcher using httpx with connection reuse.

    Non-2xx responses are returned as-is; only transport failures raise
    FetchError. The client is created lazily and closed by close(), so one
    instance can serve exactly one crawl run.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
    ):
        self.timeout = httpx.Timeout(timeout)
        self.user_agent = user_agent
        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "HttpFetcher":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with double-checked locking."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        limits=self.limits,
                        headers={"User-Agent": self.user_agent},
                        follow_redirects=True,
                    )
        return self._client

    async def fetch(self, url: str) -> Response:
        """Fetch a URL and return the response."""
        client = await self._get_client()
        try:
            resp = await client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(url, "timeout") from e
        except httpx.ConnectError as e:
            raise FetchError(url, "connection_error") from e
        except httpx.RequestError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        return Response(
            url=str(resp.url),
            status=resp.status_code,
            content=resp.content,
            headers=dict(resp.headers),
            fetched_at=time.time(),
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
