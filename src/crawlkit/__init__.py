"""Crawler / spider / pipeline toolkit."""

from .crawl import Crawler, CrawlSummary, run_crawl
from .errors import CrawlError, DropRecord, ExtractionError, FetchError
from .frontier import CrawlTask, Frontier, normalize_url
from .pipeline import Pipeline, Stage
from .spiders import MISSING, LinkSpider, SelectorSpider

__version__ = "0.1.0"

__all__ = [
    "Crawler",
    "CrawlSummary",
    "CrawlError",
    "CrawlTask",
    "DropRecord",
    "ExtractionError",
    "FetchError",
    "Frontier",
    "LinkSpider",
    "MISSING",
    "Pipeline",
    "SelectorSpider",
    "Stage",
    "normalize_url",
    "run_crawl",
]
