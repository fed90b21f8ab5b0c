"""Click CLI for typmark — render typst math and pikchr diagrams to HTML."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from typmark.config.schema import RenderSettings
from typmark.errors.exceptions import TypmarkError
from typmark.types import MathFormat, RenderMode

if TYPE_CHECKING:
    from typmark.cache.manager import CacheManager
    from typmark.core import Typmark

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, base_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelNamesMapping().get(base_level.upper(), logging.WARNING)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _settings(dark: bool | None, no_cache: bool) -> RenderSettings:
    try:
        return RenderSettings.resolve(dark_mode=dark, cache_disabled=no_cache or None)
    except ValueError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)


def _open_renderer(settings: RenderSettings) -> Typmark:
    from typmark.core import Typmark

    try:
        return Typmark(settings)
    except (TypmarkError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _open_cache() -> CacheManager:
    from typmark.cache.manager import CacheManager

    try:
        return CacheManager(cache_dir=_settings(None, False).cache_dir)
    except TypmarkError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Written to {output}[/green]")
    else:
        click.echo(text)


def _dark_option(fn):
    return click.option(
        "--dark/--no-dark", default=None, help="Also emit a dark-theme variant."
    )(fn)


def _no_cache_option(fn):
    return click.option("--no-cache", is_flag=True, default=False, help="Disable caching.")(fn)


def _verbose_option(fn):
    return click.option(
        "-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)."
    )(fn)


@click.group()
@click.version_option(package_name="typmark")
def cli() -> None:
    """typmark — Typst math and pikchr diagrams for markdown."""


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(), help="Output file path.")
@_dark_option
@_no_cache_option
@_verbose_option
def render(
    input_path: str,
    output: str | None,
    dark: bool | None,
    no_cache: bool,
    verbose: int,
) -> None:
    """Render every math span and diagram fence in a markdown file."""
    settings = _settings(dark, no_cache)
    _setup_logging(verbose, settings.log_level)
    path = Path(input_path)
    renderer = _open_renderer(settings)
    try:
        text = path.read_text(encoding="utf-8")
        result = renderer.render_document(text, base_dir=path.parent)
    except (TypmarkError, OSError, UnicodeDecodeError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        renderer.close()
    _emit(result, output)


@cli.command()
@click.argument("expression")
@click.option(
    "--mode",
    type=click.Choice([RenderMode.DISPLAY.value, RenderMode.INLINE.value]),
    default=RenderMode.INLINE.value,
    show_default=True,
    help="Math layout.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in MathFormat]),
    default=MathFormat.SVG.value,
    show_default=True,
    help="Emit an <img> with SVG or <math> markup.",
)
@_dark_option
@_no_cache_option
@_verbose_option
def math(
    expression: str,
    mode: str,
    output_format: str,
    dark: bool | None,
    no_cache: bool,
    verbose: int,
) -> None:
    """Render a single math expression to <img> or <math> markup."""
    settings = _settings(dark, no_cache)
    _setup_logging(verbose, settings.log_level)
    renderer = _open_renderer(settings)
    try:
        if output_format == MathFormat.MATHML:
            result = renderer.render_mathml(expression, RenderMode(mode))
        else:
            result = renderer.render_math(expression, RenderMode(mode))
    except TypmarkError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        renderer.close()
    click.echo(result)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(), help="Output file path.")
@_dark_option
@_no_cache_option
@_verbose_option
def diagram(
    input_path: str,
    output: str | None,
    dark: bool | None,
    no_cache: bool,
    verbose: int,
) -> None:
    """Render a pikchr source file to <img> markup."""
    settings = _settings(dark, no_cache)
    _setup_logging(verbose, settings.log_level)
    renderer = _open_renderer(settings)
    try:
        source = Path(input_path).read_text(encoding="utf-8")
        result = renderer.render_diagram(source)
    except (TypmarkError, OSError, UnicodeDecodeError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        renderer.close()
    _emit(result, output)


@cli.command()
@click.argument("package")
@_verbose_option
def fetch(package: str, verbose: int) -> None:
    """Download a typst package such as @preview/cetz:0.2.2."""
    settings = _settings(None, False)
    _setup_logging(verbose, settings.log_level)
    renderer = _open_renderer(settings)
    try:
        path = renderer.fetch_package(package)
    except (TypmarkError, ValueError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        renderer.close()
    console.print(f"[green]{package}[/green] available at {path}")


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
def cache_stats() -> None:
    """Show cache statistics."""
    mgr = _open_cache()

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Cache", style="cyan")
    table.add_column("Entries")
    table.add_column("Size (MB)")

    for stats in mgr.stats():
        table.add_row(stats.name, str(stats.entries), f"{stats.size_mb:.2f}")

    console.print(table)


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear() -> None:
    """Clear all cached renders."""
    mgr = _open_cache()
    mgr.clear()
    console.print("[green]Cache cleared.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
