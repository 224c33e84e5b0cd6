"""Exceptions and structured error reports."""

from dataclasses import dataclass


class CrawlkitError(Exception):
    """Base class for crawlkit errors."""


class FetchError(CrawlkitError):
    """A fetch could not complete (network, timeout, DNS)."""

    def __init__(self, url: str, reason: str, status: int | None = None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class ExtractionError(CrawlkitError):
    """A spider could not parse a page."""


class DropRecord(CrawlkitError):
    """Raised by a pipeline stage to stop a record from reaching later stages."""


@dataclass(frozen=True)
class CrawlError:
    """Operator-visible report of a failed task."""

    url: str
    reason: str
    kind: str
    status: int | None = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status,
            "reason": self.reason,
            "kind": self.kind,
        }
