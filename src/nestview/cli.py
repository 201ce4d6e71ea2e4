"""
Command line interface for rendering nested template pages.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigError, SiteConfig, get_settings, load_config
from .render import Diagnostic, PageComposer
from .util import parse_assignments, write_text_file

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Resolve and compose nested HTML templates.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _configure_logging(level_name: str) -> None:
    env_override = os.getenv("NESTVIEW_LOG_LEVEL") or get_settings().log_level
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Optional[Path]) -> Optional[Path]:
    """Ensure config path exists and return absolute path."""
    if value is None:
        return None
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Path) -> SiteConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        err_console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _print_diagnostics(diagnostics: List[Diagnostic]) -> None:
    if not diagnostics:
        return
    table = Table(title="Skipped While Rendering")
    table.add_column("Kind")
    table.add_column("Subject")
    table.add_column("Reason", overflow="fold")
    for diagnostic in diagnostics:
        table.add_row(*diagnostic.as_row())
    err_console.print(table)


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show nestview version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]nestview[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]nestview[/] is ready. Run [cyan]nestview render --config path/to/site.toml[/] "
            "to render a page.",
        )


@app.command()
def render(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the site TOML file.",
        callback=_resolve_config_path,
    ),
    outer: Optional[str] = typer.Option(
        None,
        "--outer",
        help="Outer template filename (overrides the config).",
    ),
    var: List[str] = typer.Option(
        None,
        "--var",
        help="Template variable as key=value (multiple allowed).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the page to this file instead of stdout.",
    ),
) -> None:
    """
    Render the outer template with its includes and head section.
    """
    site = _load_config_or_exit(config)
    composer = PageComposer.from_config(site)

    try:
        extra_vars = parse_assignments(var or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--var") from exc
    composer.set_vars(extra_vars)

    name = outer or site.outer
    if not name:
        err_console.print("[bold red]No outer template given.[/] Use --outer or set 'outer' in the config.")
        raise typer.Exit(code=1)
    if outer and composer.set_outer(outer) is None:
        err_console.print(f"[bold red]Template not found:[/] {outer}")
        raise typer.Exit(code=1)

    html = composer.render_to_string()
    _print_diagnostics(composer.diagnostics)
    if html is None:
        err_console.print(f"[bold red]Could not render[/] {name}")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(html, nl=False)
    else:
        target = write_text_file(output, html)
        err_console.print(f"[bold green]Wrote[/] {target}")


@app.command()
def resolve(
    filename: str = typer.Argument(..., help="Base name of the file to find."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Site TOML file providing the document root and group paths.",
        callback=_resolve_config_path,
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Document root (ignored when --config is given).",
    ),
    group: Optional[str] = typer.Option(
        None,
        "--group",
        "-g",
        help="Search the path registered for this group (html, css, js, ...).",
    ),
    directory: Optional[str] = typer.Option(
        None,
        "--dir",
        "-d",
        help="Search this directory below the document root.",
    ),
    relative: bool = typer.Option(
        False,
        "--relative",
        help="Print the path relative to the document root.",
    ),
) -> None:
    """
    Show which file a filename resolves to.
    """
    if config is not None:
        composer = PageComposer.from_config(_load_config_or_exit(config))
    else:
        composer = PageComposer(root)

    search = directory or (composer.get_group_path(group) if group else None)
    found = composer.find_file(filename, search, root_relative=relative)
    if found is None:
        err_console.print(f"[bold red]Not found:[/] {filename} under {search or composer.document_root}")
        raise typer.Exit(code=1)
    typer.echo(found)


@app.command()
def head(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the site TOML file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Print the head section declared in the config.
    """
    composer = PageComposer.from_config(_load_config_or_exit(config))
    _print_diagnostics(composer.head.diagnostics)
    markup = composer.display_head()
    if markup:
        typer.echo(markup)


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
