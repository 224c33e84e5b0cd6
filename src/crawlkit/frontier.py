"""URL frontier: pending queue plus visited set."""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

QUEUE_ORDERS = ("lifo", "fifo")


def normalize_url(url: str) -> str:
    """Normalize URL for deduplication (remove fragment, sort query params)."""
    parsed = urlparse(url)

    query_params = parse_qsl(parsed.query, keep_blank_values=True)
    sorted_query = urlencode(sorted(query_params))

    # Normalize path (remove trailing slash except for root)
    path = parsed.path.rstrip('/') or '/'

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        sorted_query,
        ''  # Remove fragment
    ))


@dataclass
class CrawlTask:
    """A URL to crawl with metadata."""
    url: str
    depth: int = 0
    source_url: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    added_at: float = 0.0

    def __post_init__(self):
        if self.added_at == 0.0:
            self.added_at = time.time()


class Frontier:
    """In-memory URL frontier.

    ``order="lifo"`` pops the most recently added task first, which walks a
    site depth-first (a paginated listing is followed to its end before
    sibling links). ``order="fifo"`` gives breadth-first order.

    A URL is only ever queued once: once popped it moves to the visited set,
    which never shrinks.
    """

    def __init__(self, order: str = "lifo"):
        if order not in QUEUE_ORDERS:
            raise ValueError(f"Unknown queue order {order!r}, expected one of {QUEUE_ORDERS}")
        self.order = order
        self._queue: deque[CrawlTask] = deque()
        self._queued: set[str] = set()
        self._visited: set[str] = set()

    def add(self, task: CrawlTask) -> bool:
        """Add a task. Returns False if its URL was already queued or visited."""
        url = normalize_url(task.url)
        if url in self._queued or url in self._visited:
            return False

        task.url = url
        self._queue.append(task)
        self._queued.add(url)
        return True

    def add_many(self, tasks: list[CrawlTask]) -> int:
        """Add multiple tasks. Returns count of new URLs added."""
        return sum(1 for task in tasks if self.add(task))

    def pop(self) -> CrawlTask | None:
        """Dequeue the next task and mark it visited."""
        if not self._queue:
            return None

        task = self._queue.pop() if self.order == "lifo" else self._queue.popleft()
        self._queued.discard(task.url)
        self._visited.add(task.url)
        return task

    def mark_visited(self, url: str):
        """Record a URL as visited (e.g. the target of a redirect).

        A pending task for the same URL is withdrawn from the queue.
        """
        url = normalize_url(url)
        self._visited.add(url)
        if url in self._queued:
            self._queued.discard(url)
            self._queue = deque(task for task in self._queue if task.url != url)

    def is_visited(self, url: str) -> bool:
        return normalize_url(url) in self._visited

    def is_seen(self, url: str) -> bool:
        """Check if URL is queued or already visited."""
        url = normalize_url(url)
        return url in self._queued or url in self._visited

    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    def stats(self) -> dict:
        """Get queue statistics."""
        return {
            "pending": len(self._queue),
            "visited": len(self._visited),
            "total": len(self._queue) + len(self._visited),
        }
