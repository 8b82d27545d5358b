"""Main CLI application entry point."""

import logging

import typer
from rich.console import Console
from rich.table import Table

from browserscope import __version__
from browserscope.core.factory import PlaywrightDriverFactory
from browserscope.core.protocols import UrlComponent, UrlKind
from browserscope.core.session import BrowserSession
from browserscope.core.urls import compare_url as compare_urls
from browserscope.utils.config import ConfigLoader
from browserscope.utils.exceptions import BrowserScopeError, ConfigurationError
from browserscope.utils.log import configure_logging

console = Console()

app = typer.Typer(
    name="browserscope",
    help="Scope-aware browser test assertions.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"browserscope v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show debug logging",
    ),
) -> None:
    """browserscope - scope-aware browser test assertions."""
    configure_logging(logging.DEBUG if verbose else None, verbose=verbose)


@app.command()
def browsers() -> None:
    """List the browsers configured for test runs."""
    try:
        config = ConfigLoader.load()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=2) from e

    table = Table(title="Configured browsers")
    table.add_column("Browser", style="cyan")
    table.add_column("Headless")
    table.add_column("Stealth")
    for name in config.browsers:
        table.add_row(name, str(config.headless), str(config.stealth))
    console.print(table)
    if config.base_url:
        console.print(f"Base URL: {config.base_url}")


@app.command("compare-url")
def compare_url(
    current: str = typer.Argument(..., help="Absolute URL of the page"),
    expected: str = typer.Argument(..., help="Expected URL"),
    kind: str = typer.Option(
        "absolute",
        "--kind",
        "-k",
        help="How to read EXPECTED: 'absolute' or 'relative'",
    ),
    component: list[str] = typer.Option(
        [],
        "--component",
        "-c",
        help="URL part to compare (scheme, host, path, query, fragment, "
        "path_and_query, scheme_and_host, all); repeatable",
    ),
) -> None:
    """Compare two URLs offline. Exit code 0 on match, 1 on mismatch."""
    try:
        url_kind = _parse_member(UrlKind, kind, "--kind")
        components = [_parse_member(UrlComponent, c, "--component") for c in component]
        matches = compare_urls(current, expected, url_kind, *components)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2) from e

    if matches:
        console.print("[green]match[/green]")
        return
    console.print("[yellow]mismatch[/yellow]")
    raise typer.Exit(code=1)


@app.command("open")
def open_url(
    url: str = typer.Argument(..., help="URL to open"),
    browser: str = typer.Option(
        "chromium",
        "--browser",
        "-b",
        help="Browser to launch: chromium, firefox or webkit",
    ),
    headless: bool = typer.Option(
        True,
        "--headless/--headed",
        help="Run browser without a visible window",
    ),
) -> None:
    """Open a URL in a real browser and print its URL and title."""
    try:
        config = ConfigLoader.load()
        factory = PlaywrightDriverFactory(
            browser,
            headless=headless,
            stealth=config.stealth,
            page_load_timeout=config.page_load_timeout,
        )
        with BrowserSession.open(factory.create(), config) as session:
            session.navigate(url)
            console.print(f"URL:   {session.current_url}")
            console.print(f"Title: {session.get_title()}")
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=2) from e
    except BrowserScopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e


def _parse_member(enum_type, value: str, option: str):
    try:
        return enum_type[value.strip().upper()]
    except KeyError as e:
        choices = ", ".join(m.lower() for m in enum_type.__members__)
        raise ConfigurationError(
            f"Invalid {option} '{value}'. Choose from: {choices}"
        ) from e


if __name__ == "__main__":
    app()
