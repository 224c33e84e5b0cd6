"""CLI interface using typer."""

import asyncio
import json
import sys

import typer

from .config import settings
from .crawl import OUTPUT_FORMATS, build_fetcher
from .errors import FetchError

app = typer.Typer(
    name="crawlkit",
    help="Crawl sites with a spider and push records through a pipeline",
    no_args_is_help=True,
)


def parse_fields(fields: list[str]) -> dict[str, str]:
    """Parse ``name=selector`` options into a mapping."""
    parsed = {}
    for item in fields:
        name, sep, selector = item.partition("=")
        if not sep or not name.strip() or not selector.strip():
            raise typer.BadParameter(f"Expected name=selector, got {item!r}", param_hint="--field")
        parsed[name.strip()] = selector.strip()
    return parsed


def _check_choice(value: str, choices: tuple[str, ...], hint: str) -> str:
    if value not in choices:
        raise typer.BadParameter(f"Expected one of {', '.join(choices)}", param_hint=hint)
    return value


async def _fetch(url: str, use_browser: bool = False) -> dict:
    """Fetch a URL and return result as dict."""
    fetcher = build_fetcher(use_browser)
    try:
        response = await fetcher.fetch(url)
    finally:
        await fetcher.close()

    return {
        "url": response.url,
        "status": response.status,
        "content_length": len(response.content),
        "headers": response.headers,
        "content": response.text,
    }


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL to fetch"),
    output: str = typer.Option(None, "-o", "--output", help="Output file (JSON)"),
    js: bool = typer.Option(False, "--js", help="Use browser for JavaScript rendering"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only output content"),
):
    """Fetch a single URL."""
    try:
        result = asyncio.run(_fetch(url, use_browser=js))
    except FetchError as e:
        typer.echo(f"Fetch failed: {e.reason}", err=True)
        raise typer.Exit(code=1)

    if output:
        with open(output, "w") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        typer.echo(f"Saved to {output}")
    elif quiet:
        sys.stdout.write(result["content"])
    else:
        typer.echo(f"URL: {result['url']}")
        typer.echo(f"Status: {result['status']}")
        typer.echo(f"Content-Length: {result['content_length']}")
        typer.echo("---")
        typer.echo(result["content"][:2000])
        if len(result["content"]) > 2000:
            typer.echo(f"\n... (truncated, {len(result['content'])} chars total)")


@app.command()
def crawl(
    start_url: str = typer.Argument(..., help="Starting URL for crawl"),
    item: str = typer.Option(..., "--item", "-i", help="CSS selector matching one record"),
    field: list[str] = typer.Option(..., "--field", "-F", help="Record field as name=selector (selector@attr for attributes)"),
    next_selector: str = typer.Option(None, "--next", help="CSS selector of the next-page link"),
    order: str = typer.Option(settings.queue_order, "--order", help="Queue order: lifo (depth-first) or fifo"),
    max_pages: int = typer.Option(None, "--max-pages", "-n", help="Maximum pages to fetch"),
    output: str = typer.Option("crawl_results", "-o", "--output", help="Output directory"),
    output_format: str = typer.Option("jsonl", "--format", "-f", help="Output format: jsonl, sqlite, echo"),
    js: bool = typer.Option(False, "--js", help="Use browser for all pages"),
    robots: bool = typer.Option(settings.respect_robots, "--respect-robots/--ignore-robots", help="Honour robots.txt"),
):
    """Scrape records from a paginated listing."""
    from .crawl import run_crawl
    from .spiders import SelectorSpider

    _check_choice(order, ("lifo", "fifo"), "--order")
    _check_choice(output_format, OUTPUT_FORMATS, "--format")
    spider = SelectorSpider(item, parse_fields(field), next_selector=next_selector)

    summary = asyncio.run(run_crawl(
        start_url=start_url,
        spider=spider,
        output_dir=output,
        output_format=output_format,
        order=order,
        max_pages=max_pages,
        use_browser=js,
        respect_robots=robots,
    ))
    if summary.errors and not summary.records:
        raise typer.Exit(code=1)


@app.command()
def links(
    start_url: str = typer.Argument(..., help="Starting URL for crawl"),
    max_pages: int = typer.Option(100, "--max-pages", "-n", help="Maximum pages to fetch"),
    max_depth: int = typer.Option(3, "--max-depth", "-d", help="Maximum link depth"),
    same_domain: bool = typer.Option(True, "--same-domain/--any-domain", help="Stay on same domain"),
    order: str = typer.Option("fifo", "--order", help="Queue order: lifo (depth-first) or fifo"),
    output: str = typer.Option("crawl_results", "-o", "--output", help="Output directory"),
    output_format: str = typer.Option("jsonl", "--format", "-f", help="Output format: jsonl, sqlite, echo"),
    js: bool = typer.Option(False, "--js", help="Use browser for all pages"),
    robots: bool = typer.Option(settings.respect_robots, "--respect-robots/--ignore-robots", help="Honour robots.txt"),
):
    """Crawl a website by following links, one record per page."""
    from .crawl import run_crawl
    from .spiders import LinkSpider

    _check_choice(order, ("lifo", "fifo"), "--order")
    _check_choice(output_format, OUTPUT_FORMATS, "--format")

    asyncio.run(run_crawl(
        start_url=start_url,
        spider=LinkSpider(),
        output_dir=output,
        output_format=output_format,
        order=order,
        max_pages=max_pages,
        max_depth=max_depth,
        same_domain=same_domain,
        use_browser=js,
        respect_robots=robots,
    ))


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"crawlkit {__version__}")


if __name__ == "__main__":
    app()
