"""Tests for data extraction module."""

import pytest

from crawlkit.extract import Extractor, node_value, split_selector


@pytest.fixture
def html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
    </head>
    <body>
        <h1>Main Title</h1>
        <h2 class="subtitle">Subtitle One</h2>
        <h2 class="subtitle">Subtitle Two</h2>
        <a href="http://example.com/page1">Link One</a>
        <a href="/page2">Link Two</a>
        <a href="">Empty Href</a>
        <div class="content">
            <p>Paragraph one</p>
            <p>Paragraph two</p>
            <p>   </p>
        </div>
    </body>
    </html>
    """


class TestExtractorNodes:
    def test_nodes_in_document_order(self, html):
        """nodes() should return every match in document order."""
        nodes = Extractor(html).nodes("h2")
        assert [node.text(strip=True) for node in nodes] == ["Subtitle One", "Subtitle Two"]

    def test_nodes_no_match(self, html):
        """nodes() should return an empty list when nothing matches."""
        assert Extractor(html).nodes(".nonexistent") == []

    def test_css_first(self, html):
        """css_first() should return the text of the first match."""
        assert Extractor(html).css_first("h2") == "Subtitle One"

    def test_css_first_no_match(self, html):
        """css_first() should return None when nothing matches."""
        assert Extractor(html).css_first("table") is None


class TestNodeValue:
    def test_text(self, html):
        """Without an attribute the stripped text should be returned."""
        node = Extractor(html).nodes("h1")[0]
        assert node_value(node) == "Main Title"

    def test_attribute(self, html):
        """With an attribute its value should be returned."""
        node = Extractor(html).nodes("a")[1]
        assert node_value(node, "href") == "/page2"

    def test_empty_values_are_none(self, html):
        """Blank text and empty attributes should both read as None."""
        page = Extractor(html)
        assert node_value(page.nodes(".content p")[2]) is None
        assert node_value(page.nodes("a")[2], "href") is None
        assert node_value(page.nodes("a")[0], "title") is None


class TestExtractorPage:
    def test_title(self, html):
        """title() should return the page title."""
        assert Extractor(html).title() == "Test Page"

    def test_title_missing(self):
        """title() should return None for a page without one."""
        assert Extractor("<p>untitled</p>").title() is None

    def test_get_links(self, html):
        """get_links() should return href and text for every anchor with href."""
        links = Extractor(html).get_links()
        assert {"href": "/page2", "text": "Link Two"} in links
        assert len(links) == 3


class TestSplitSelector:
    def test_plain_selector(self):
        """A plain selector should have no attribute."""
        assert split_selector("h2.title") == ("h2.title", None)

    def test_attribute_selector(self):
        """css@attr should split into selector and attribute."""
        assert split_selector("a.more@href") == ("a.more", "href")

    def test_attribute_of_context_node(self):
        """@attr alone should read the attribute of the context node."""
        assert split_selector("@data-id") == ("", "data-id")

    def test_strips_whitespace(self):
        """Whitespace around both parts should be stripped."""
        assert split_selector(" a @ href ") == ("a", "href")
