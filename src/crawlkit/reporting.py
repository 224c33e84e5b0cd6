"""Reporters receive per-page progress, crawl errors and the run summary."""

from typing import TYPE_CHECKING

import typer

from .core import Response
from .errors import CrawlError

if TYPE_CHECKING:
    from .crawl import CrawlSummary
    from .frontier import CrawlTask


class EchoReporter:
    """Prints progress and summary to stdout, errors to stderr."""

    def __init__(self, verbose: bool = True):
        self.verbose = verbose
        self._pages = 0

    def page(self, task: "CrawlTask", response: Response):
        self._pages += 1
        if self.verbose:
            typer.echo(f"[{self._pages}] {response.status} {response.url}")

    def error(self, error: CrawlError):
        status = f" {error.status}" if error.status is not None else ""
        typer.echo(f"ERROR [{error.kind}]{status} {error.url}: {error.reason}", err=True)

    def summary(self, summary: "CrawlSummary"):
        typer.echo(
            f"\nCrawl complete: {summary.pages_fetched} pages, "
            f"{summary.records} records ({summary.dropped} dropped), "
            f"{len(summary.errors)} errors in {summary.elapsed:.1f}s"
        )
        if summary.pending:
            typer.echo(f"Stopped with {summary.pending} URLs still queued")


class MemoryReporter:
    """Collects everything it is told; useful for tests and embedding."""

    def __init__(self):
        self.pages: list[str] = []
        self.errors: list[CrawlError] = []
        self.summaries: list["CrawlSummary"] = []

    def page(self, task: "CrawlTask", response: Response):
        self.pages.append(task.url)

    def error(self, error: CrawlError):
        self.errors.append(error)

    def summary(self, summary: "CrawlSummary"):
        self.summaries.append(summary)
