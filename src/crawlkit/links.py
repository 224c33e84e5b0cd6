"""Link discovery helpers."""

from urllib.parse import urljoin, urlparse

from .extract import Extractor
from .frontier import normalize_url

SKIP_PREFIXES = ('#', 'javascript:', 'mailto:', 'tel:', 'data:')


def absolutize(href: str, base_url: str) -> str | None:
    """Resolve href against base_url; None for non-http(s) targets."""
    href = href.strip()
    if not href or href.startswith(SKIP_PREFIXES):
        return None

    # Handle protocol-relative URLs
    if href.startswith('//'):
        href = 'https:' + href

    absolute_url = urljoin(base_url, href)
    if urlparse(absolute_url).scheme not in ("http", "https"):
        return None
    return absolute_url


def extract_links(html: str, base_url: str) -> list[str]:
    """Extract normalized, de-duplicated links from HTML in document order."""
    seen: set[str] = set()
    links = []
    for link in Extractor(html).get_links():
        absolute_url = absolutize(link["href"], base_url)
        if absolute_url is None:
            continue
        normalized = normalize_url(absolute_url)
        if normalized not in seen:
            seen.add(normalized)
            links.append(normalized)
    return links
