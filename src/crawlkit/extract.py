"""HTML data extraction using CSS selectors."""

from selectolax.parser import HTMLParser, Node


def node_value(node: Node, attribute: str | None = None) -> str | None:
    """Return a node's stripped text, or one of its attributes.

    Empty values are returned as None so callers can treat them as missing.
    """
    if attribute:
        value = node.attributes.get(attribute)
    else:
        value = node.text(strip=True)
    return value or None


def split_selector(spec: str) -> tuple[str, str | None]:
    """Split ``"css@attr"`` into ``("css", "attr")``.

    Plain selectors have no attribute; ``"@attr"`` reads the attribute of the
    context node itself (empty selector).
    """
    selector, sep, attribute = spec.rpartition("@")
    if not sep:
        return spec.strip(), None
    return selector.strip(), attribute.strip() or None


class Extractor:
    """Extract data from HTML using CSS selectors."""

    def __init__(self, html: str):
        self.tree = HTMLParser(html)

    def nodes(self, selector: str) -> list[Node]:
        return self.tree.css(selector)

    def css_first(self, selector: str) -> str | None:
        """Text of the first match, or None."""
        node = self.tree.css_first(selector)
        if node is None:
            return None
        return node_value(node)

    def title(self) -> str | None:
        return self.css_first("title")

    def get_links(self) -> list[dict]:
        """Get all links with text and href."""
        links = []
        for node in self.tree.css("a[href]"):
            href = node.attributes.get("href") or ""
            text = node.text(strip=True)
            links.append({"href": href, "text": text})
        return links
