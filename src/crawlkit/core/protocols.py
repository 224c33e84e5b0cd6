"""Protocol definitions for crawler components."""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, Protocol

if TYPE_CHECKING:
    from ..crawl import Crawler, CrawlSummary
    from ..errors import CrawlError
    from ..frontier import CrawlTask

Record = dict[str, Any]


@dataclass(frozen=True)
class Response:
    """HTTP response container."""

    url: str
    status: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    fetched_at: float = field(default_factory=time.time)

    @property
    def text(self) -> str:
        """Decode content as UTF-8."""
        return self.content.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300


class Fetcher(Protocol):
    """Protocol for URL fetchers."""

    async def fetch(self, url: str) -> Response:
        """Fetch a URL and return the response. Raises FetchError on transport failure."""
        ...

    async def close(self) -> None:
        """Release resources held for the run."""
        ...


class Spider(Protocol):
    """Protocol for spiders that turn a response into records."""

    def parse(self, response: Response, crawler: "Crawler") -> Iterator[Record]:
        """Yield records, optionally calling crawler.schedule() for follow-up URLs."""
        ...


class Reporter(Protocol):
    """Sink for page progress, crawl errors and the end-of-run summary."""

    def page(self, task: "CrawlTask", response: Response) -> None:
        ...

    def error(self, error: "CrawlError") -> None:
        ...

    def summary(self, summary: "CrawlSummary") -> None:
        ...
