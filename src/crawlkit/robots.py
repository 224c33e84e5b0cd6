"""robots.txt policy with a per-domain cache."""

import asyncio
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from robotexclusionrulesparser import RobotExclusionRulesParser

# Default TTL for robots.txt cache (1 hour)
ROBOTS_CACHE_TTL = 3600.0


@dataclass
class RobotsState:
    """Cached robots.txt for a single domain."""
    domain: str
    parser: RobotExclusionRulesParser | None = None
    fetched_at: float = 0.0


class RobotsPolicy:
    """Answers whether a URL may be fetched according to its site's robots.txt.

    A robots.txt that is missing, returns a non-200 status or cannot be
    fetched allows everything.
    """

    def __init__(
        self,
        user_agent: str = "crawlkit/0.1",
        cache_ttl: float = ROBOTS_CACHE_TTL,
        timeout: float = 10.0,
    ):
        self.user_agent = user_agent
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self._domains: dict[str, RobotsState] = {}
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create shared HTTP client for robots.txt fetching."""
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        headers={"User-Agent": self.user_agent},
                        follow_redirects=True,
                    )
        return self._client

    def _is_cache_valid(self, state: RobotsState) -> bool:
        return time.time() - state.fetched_at < self.cache_ttl

    async def get_state(self, url: str) -> RobotsState:
        """Get cached robots state for the URL's domain, fetching when stale."""
        domain = urlparse(url).netloc
        state = self._domains.get(domain)
        if state is None or not self._is_cache_valid(state):
            state = await self._fetch_robots(domain, url)
            self._domains[domain] = state
        return state

    async def _fetch_robots(self, domain: str, url: str) -> RobotsState:
        parsed = urlparse(url)
        robots_url = f"{parsed.scheme}://{domain}/robots.txt"
        state = RobotsState(domain=domain, fetched_at=time.time())

        client = await self._get_client()
        try:
            resp = await client.get(robots_url)
        except httpx.HTTPError:
            return state

        if resp.status_code == 200:
            parser = RobotExclusionRulesParser()
            parser.parse(resp.text)
            state.parser = parser
        return state

    async def is_allowed(self, url: str) -> bool:
        """Check if URL is allowed by robots.txt."""
        state = await self.get_state(url)
        if state.parser is None:
            return True
        return state.parser.is_allowed(self.user_agent, url)

    async def close(self):
        """Close the shared HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
