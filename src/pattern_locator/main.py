"""
Pattern Locator - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--patterns, --pattern-set, etc.)
    2. Environment variables (PATTERN_LOCATOR__LOCATOR__DEFAULT_PATTERN_SET, etc.)
    3. Config file (pattern-locator.yaml)

Usage:
    pattern-locator check resources/patterns
    pattern-locator candidates input "{Login Form} Username[2]" --pattern-set loginPage
    pattern-locator locate https://example.com/login button "Login" --visible
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from pattern_locator import __version__
from pattern_locator.config import get_settings
from pattern_locator.engine.resolver import LocatorResolver, ResolutionRequest
from pattern_locator.exceptions import PatternLocatorError, ElementNotFoundError
from pattern_locator.patterns.loader import PatternSetLoader

app = typer.Typer(
    name="pattern-locator",
    help="Resolve semantic field names to selectors using pattern sets",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build_resolver(patterns: Optional[List[Path]]) -> LocatorResolver:
    settings = get_settings()
    if patterns:
        settings = settings.merge_with({"locator": {"pattern_paths": [str(p) for p in patterns]}})
    return LocatorResolver.from_settings(settings)


@app.command()
def check(
    paths: List[Path] = typer.Argument(..., help="Pattern files or directories"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Load and validate pattern files, then list what they define.
    """
    setup_logging(verbose)
    loader = PatternSetLoader()
    try:
        pattern_sets = loader.load_paths(paths)
    except PatternLocatorError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{len(pattern_sets)} pattern set(s)")
    table.add_column("Pattern set", style="bold")
    table.add_column("Field types")
    table.add_column("Sections")
    table.add_column("Locations")
    table.add_column("Scroll")
    for pattern_set in pattern_sets:
        table.add_row(
            pattern_set.id,
            ", ".join(sorted(pattern_set.fields)) or "-",
            ", ".join(sorted(pattern_set.sections)) or "-",
            ", ".join(sorted(pattern_set.locations)) or "-",
            "✓" if pattern_set.scroll else "-",
        )
    console.print(table)

    ids = [p.id for p in pattern_sets]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        console.print(f"[red]✗ Duplicate pattern set ids: {', '.join(duplicates)}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ All pattern files are valid[/green]")


@app.command()
def candidates(
    element_type: str = typer.Argument(..., help="Element type, e.g. button or checkbox.fieldSet"),
    field: str = typer.Argument(..., help="Field descriptor, e.g. \"{Login Form} Username[2]\""),
    patterns: Optional[List[Path]] = typer.Option(None, "--patterns", "-p", help="Pattern files or directories"),
    pattern_set: Optional[str] = typer.Option(None, "--pattern-set", "-s", help="Pattern set to use"),
    url: str = typer.Option("", "--url", "-u", help="Current page URL, for page mapping"),
    value: Optional[str] = typer.Option(None, "--value", help="Value bound to #{fieldValue}"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Show the composed candidates for a field without opening a browser.

    Label indirection needs a live page, so forId candidates are not shown.
    """
    setup_logging(verbose)
    try:
        resolver = _build_resolver(patterns)
        request = ResolutionRequest(
            element_type=element_type,
            field=field,
            explicit_pattern_set=pattern_set,
            field_value=value,
        )
        locator = asyncio.run(resolver.explain(request, current_url=url))
    except PatternLocatorError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(Panel.fit(f"[bold blue]{escape(locator.description)}[/bold blue]", border_style="blue"))
    for index, candidate in enumerate(locator.candidates, start=1):
        console.print(f"  [dim]{index:>2}.[/dim] {escape(candidate)}")
    if locator.scroll_candidates:
        console.print(f"[dim]Scroll containers:[/dim] {escape('; '.join(locator.scroll_candidates))}")


@app.command()
def locate(
    url: str = typer.Argument(..., help="Page to open"),
    element_type: str = typer.Argument(..., help="Element type, e.g. button"),
    field: str = typer.Argument(..., help="Field descriptor"),
    patterns: Optional[List[Path]] = typer.Option(None, "--patterns", "-p", help="Pattern files or directories"),
    pattern_set: Optional[str] = typer.Option(None, "--pattern-set", "-s", help="Pattern set to use"),
    visible: bool = typer.Option(False, "--visible", "-v", help="Run with visible browser"),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", help="Retry timeout in ms"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Open a page with Playwright and resolve one field against it.
    """
    setup_logging(verbose)
    try:
        resolver = _build_resolver(patterns)
    except PatternLocatorError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    request = ResolutionRequest(
        element_type=element_type,
        field=field,
        explicit_pattern_set=pattern_set,
        timeout_ms=timeout,
    )
    try:
        selector = asyncio.run(_locate_async(resolver, url, request, headless=not visible))
    except ElementNotFoundError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        for candidate in e.candidates:
            marker = "hidden" if candidate in e.existing_invisible else "missing"
            console.print(f"  [dim]{marker:>7}[/dim] {escape(candidate)}")
        raise typer.Exit(1)
    except PatternLocatorError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ {escape(selector)}[/green]")


async def _locate_async(
    resolver: LocatorResolver,
    url: str,
    request: ResolutionRequest,
    headless: bool,
) -> str:
    from playwright.async_api import async_playwright
    from pattern_locator.probes.playwright_probe import PlaywrightProbe

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url)
            await page.wait_for_load_state("load")
            probe = PlaywrightProbe(page)
            return await resolver.resolve_request(probe, request, current_url=page.url)
        finally:
            await browser.close()


@app.command()
def version():
    """Show version information."""
    console.print(f"pattern-locator {__version__}")


if __name__ == "__main__":
    app()
