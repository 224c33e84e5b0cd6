"""Spiders turn a fetched page into records and follow-up URLs."""

from typing import TYPE_CHECKING, Any, Iterator, Mapping

from .core import Record, Response
from .errors import ExtractionError
from .extract import Extractor, node_value, split_selector
from .links import extract_links

if TYPE_CHECKING:
    from .crawl import Crawler

# Value given to a field whose selector matched nothing on an item.
MISSING: Any = None


class SelectorSpider:
    """Listing spider driven by CSS selectors.

    Each node matching ``item_selector`` becomes one record. ``fields`` maps
    record keys to selectors evaluated inside the item; ``"a.title"`` takes
    the node text, ``"a.title@href"`` takes an attribute. A field that matches
    nothing gets ``missing`` (``MISSING`` by default) instead of failing the
    page.

    ``next_selector`` points at the pagination link. When it matches nothing
    the listing has ended and nothing is scheduled. An invalid selector raises
    ExtractionError.
    """

    def __init__(
        self,
        item_selector: str,
        fields: Mapping[str, str],
        next_selector: str | None = None,
        missing: Any = MISSING,
        include_url: bool = True,
    ):
        if not fields:
            raise ValueError("SelectorSpider needs at least one field")
        self.item_selector = item_selector
        self.fields = {name: split_selector(spec) for name, spec in fields.items()}
        self.next_selector = next_selector
        self.missing = missing
        self.include_url = include_url

    def parse(self, response: Response, crawler: "Crawler") -> Iterator[Record]:
        page = Extractor(response.text)

        for item in self._select(page, self.item_selector):
            record: Record = {}
            for name, (selector, attribute) in self.fields.items():
                record[name] = self._field(item, selector, attribute)
            if self.include_url:
                record["url"] = response.url
            yield record

        if self.next_selector:
            next_url = self._next_url(page)
            if next_url:
                crawler.schedule(next_url)

    def _select(self, page: Extractor, selector: str) -> list:
        try:
            return page.nodes(selector)
        except ValueError as e:
            raise ExtractionError(f"invalid selector {selector!r}: {e}") from e

    def _field(self, item, selector: str, attribute: str | None) -> Any:
        try:
            node = item.css_first(selector) if selector else item
        except ValueError as e:
            raise ExtractionError(f"invalid selector {selector!r}: {e}") from e
        if node is None:
            return self.missing
        value = node_value(node, attribute)
        return self.missing if value is None else value

    def _next_url(self, page: Extractor) -> str | None:
        nodes = self._select(page, self.next_selector)
        if not nodes:
            return None
        return nodes[0].attributes.get("href") or None


class LinkSpider:
    """Records one summary per page and follows every link on it."""

    def __init__(self, include_content: bool = False):
        self.include_content = include_content

    def parse(self, response: Response, crawler: "Crawler") -> Iterator[Record]:
        page = Extractor(response.text)
        task = crawler.current

        record: Record = {
            "url": response.url,
            "status": response.status,
            "title": page.title(),
            "depth": task.depth if task else 0,
            "source_url": task.source_url if task else None,
            "content_length": len(response.content),
            "fetched_at": response.fetched_at,
        }
        if self.include_content:
            record["content"] = response.text
        yield record

        for link in extract_links(response.text, response.url):
            crawler.schedule(link)
