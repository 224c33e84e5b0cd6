"""Crawler driver: queue, fetch, extract, pipe."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urlparse

import typer

from .config import settings
from .core import Fetcher, HttpFetcher, Reporter, Response, Spider
from .errors import CrawlError, ExtractionError, FetchError
from .frontier import CrawlTask, Frontier, normalize_url
from .links import absolutize
from .output import EchoStage, JsonLinesStage, SqliteStage
from .pipeline import Pipeline, Stage, StripStage
from .reporting import EchoReporter
from .robots import RobotsPolicy


@dataclass(frozen=True)
class CrawlSummary:
    """Outcome of one crawl run."""
    pages_fetched: int
    records: int
    dropped: int
    errors: tuple[CrawlError, ...]
    pending: int
    visited: frozenset[str] = field(default_factory=frozenset)
    elapsed: float = 0.0

    def to_dict(self) -> dict:
        return {
            "pages_fetched": self.pages_fetched,
            "records": self.records,
            "dropped": self.dropped,
            "errors": [error.to_dict() for error in self.errors],
            "pending": self.pending,
            "visited": sorted(self.visited),
            "elapsed": self.elapsed,
        }


class Crawler:
    """Single-task crawler driver.

    Tasks are processed one at a time: fetched, parsed by the spider and
    every yielded record piped to completion before the next task is popped.
    Fetch failures are reported and skipped; exceptions from pipeline stages
    are not caught and end the run.
    """

    def __init__(
        self,
        spider: Spider,
        fetcher: Fetcher,
        pipeline: Pipeline | None = None,
        *,
        reporter: Reporter | None = None,
        order: str | None = None,
        max_pages: int | None = None,
        max_depth: int | None = None,
        allowed_domains: Iterable[str] | None = None,
        robots: RobotsPolicy | None = None,
    ):
        self.spider = spider
        self.fetcher = fetcher
        self.pipeline = pipeline or Pipeline()
        self.reporter = reporter or EchoReporter()
        self.frontier = Frontier(order or settings.queue_order)
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.allowed_domains = (
            {domain.lower() for domain in allowed_domains} if allowed_domains else None
        )
        self.robots = robots

        self.current: CrawlTask | None = None
        self.response: Response | None = None
        self.pages_fetched = 0
        self.records = 0
        self.errors: list[CrawlError] = []

    def schedule(self, url: str, *, meta: dict[str, Any] | None = None) -> bool:
        """Queue a URL unless it was already queued or visited.

        During extraction, relative URLs resolve against the current response
        and the new task is one level deeper than the current one.
        Returns whether the URL was queued.
        """
        base_url = self.response.url if self.response is not None else None
        absolute_url = absolutize(url, base_url) if base_url else url
        if absolute_url is None or urlparse(absolute_url).scheme not in ("http", "https"):
            return False

        if self.allowed_domains is not None:
            if urlparse(absolute_url).netloc.lower() not in self.allowed_domains:
                return False

        depth = self.current.depth + 1 if self.current is not None else 0
        if self.max_depth is not None and depth > self.max_depth:
            return False

        return self.frontier.add(CrawlTask(
            url=absolute_url,
            depth=depth,
            source_url=self.current.url if self.current is not None else None,
            meta=dict(meta or {}),
        ))

    @property
    def visited(self) -> frozenset[str]:
        return self.frontier.visited

    def _report(self, error: CrawlError):
        self.errors.append(error)
        self.reporter.error(error)

    def _limit_reached(self) -> bool:
        return self.max_pages is not None and self.pages_fetched >= self.max_pages

    async def _process(self, task: CrawlTask):
        url = task.url

        if self.robots is not None and not await self.robots.is_allowed(url):
            self._report(CrawlError(url=url, reason="disallowed by robots.txt", kind="robots"))
            return

        self.pages_fetched += 1
        try:
            response = await self.fetcher.fetch(url)
        except FetchError as e:
            self._report(CrawlError(url=url, reason=e.reason, kind="transport", status=e.status))
            return

        if normalize_url(response.url) != url:
            self.frontier.mark_visited(response.url)

        if not response.ok:
            self._report(CrawlError(
                url=url,
                reason=f"http_{response.status}",
                kind="status",
                status=response.status,
            ))
            return

        self.reporter.page(task, response)
        self.response = response

        records = iter(self.spider.parse(response, self))
        while True:
            try:
                record = next(records)
            except StopIteration:
                break
            except ExtractionError as e:
                self._report(CrawlError(
                    url=url,
                    reason=str(e),
                    kind="extraction",
                    status=response.status,
                ))
                break
            self.records += 1
            self.pipeline.submit(record, self)

    async def run(self, seed: str | None = None) -> CrawlSummary:
        """Crawl until the queue is empty (or max_pages fetches were made)."""
        if seed is not None:
            self.schedule(seed)

        start_time = time.time()
        try:
            self.pipeline.open(self)
            while not self._limit_reached():
                task = self.frontier.pop()
                if task is None:
                    break
                self.current = task
                self.response = None
                await self._process(task)
        finally:
            self.current = None
            self.response = None
            self.pipeline.close()
            await self.fetcher.close()
            if self.robots is not None:
                await self.robots.close()

        summary = CrawlSummary(
            pages_fetched=self.pages_fetched,
            records=self.records,
            dropped=self.pipeline.dropped,
            errors=tuple(self.errors),
            pending=self.frontier.pending_count(),
            visited=self.frontier.visited,
            elapsed=time.time() - start_time,
        )
        self.reporter.summary(summary)
        return summary


OUTPUT_FORMATS = ("jsonl", "sqlite", "echo")


def build_output_stage(output_dir: str | Path, output_format: str) -> Stage:
    """Pick the persistence stage for an output format."""
    output_dir = Path(output_dir)
    if output_format == "jsonl":
        return JsonLinesStage(output_dir / "results.jsonl")
    if output_format == "sqlite":
        return SqliteStage(output_dir / "results.db")
    if output_format == "echo":
        return EchoStage()
    raise ValueError(f"Unknown output format {output_format!r}, expected one of {OUTPUT_FORMATS}")


def build_fetcher(use_browser: bool = False) -> Fetcher:
    if use_browser:
        from .core import get_browser_fetcher
        return get_browser_fetcher()(timeout=30.0, user_agent=settings.user_agent)
    return HttpFetcher(
        timeout=settings.timeout,
        user_agent=settings.user_agent,
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
    )


async def run_crawl(
    start_url: str,
    spider: Spider,
    output_dir: str = "crawl_results",
    output_format: str = "jsonl",
    order: str | None = None,
    max_pages: int | None = None,
    max_depth: int | None = None,
    same_domain: bool = False,
    use_browser: bool = False,
    respect_robots: bool | None = None,
    extra_stages: Iterable[Stage] = (),
) -> CrawlSummary:
    """Run a crawl from one seed URL and persist the records."""
    pipeline = Pipeline([StripStage(), *extra_stages, build_output_stage(output_dir, output_format)])

    if respect_robots is None:
        respect_robots = settings.respect_robots
    robots = None
    if respect_robots:
        robots = RobotsPolicy(
            user_agent=settings.user_agent,
            cache_ttl=settings.robots_cache_ttl,
            timeout=settings.timeout,
        )

    crawler = Crawler(
        spider,
        build_fetcher(use_browser),
        pipeline,
        reporter=EchoReporter(),
        order=order,
        max_pages=max_pages,
        max_depth=max_depth,
        allowed_domains=[urlparse(start_url).netloc] if same_domain else None,
        robots=robots,
    )

    typer.echo(f"Starting crawl from {start_url}")
    typer.echo(f"Order: {crawler.frontier.order}, max pages: {max_pages or 'unlimited'}")

    summary = await crawler.run(start_url)
    if output_format != "echo":
        typer.echo(f"Results saved to {output_dir}")
    return summary
