"""Shared fakes for crawler tests."""

import pytest

from crawlkit.core import Response
from crawlkit.errors import FetchError
from crawlkit.pipeline import Stage
from crawlkit.reporting import MemoryReporter


class FakeFetcher:
    """Serves canned responses keyed by URL and records every fetch."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.fetched: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> Response:
        self.fetched.append(url)
        page = self.pages.get(url)
        if page is None:
            return Response(url=url, status=404, content=b"")
        if isinstance(page, FetchError):
            raise page
        if isinstance(page, Response):
            return page
        status, body = page
        return Response(url=url, status=status, content=body.encode("utf-8"))

    async def close(self):
        self.closed = True


class ScriptedSpider:
    """Yields canned records per URL and schedules canned links."""

    def __init__(self, script: dict):
        self.script = script
        self.parsed: list[str] = []

    def parse(self, response, crawler):
        self.parsed.append(response.url)
        records, links = self.script.get(response.url, ([], []))
        for record in records:
            yield dict(record)
        for link in links:
            crawler.schedule(link)


class CollectStage(Stage):
    """Appends every record it sees to a shared list."""

    def __init__(self, name: str = "collect", seen: list | None = None):
        self.name = name
        self.seen = seen if seen is not None else []
        self.opened = False
        self.closed = False

    def open(self, crawler):
        self.opened = True

    def close(self):
        self.closed = True

    def process(self, record, crawler):
        self.seen.append((self.name, record.get("id")))
        return record


@pytest.fixture
def reporter():
    return MemoryReporter()
