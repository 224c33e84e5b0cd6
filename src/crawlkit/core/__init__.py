"""Core crawler components."""

from .fetcher import HttpFetcher
from .protocols import Fetcher, Record, Reporter, Response, Spider

__all__ = ["Fetcher", "Record", "Reporter", "Response", "Spider", "HttpFetcher"]


# Lazy import for optional browser support
def get_browser_fetcher():
    from .browser_fetcher import BrowserFetcher
    return BrowserFetcher
