"""Scan command."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from . import app
from ._common import console, split_multi
from ..api import run
from ..config import load_config
from ..exceptions import TrackscanError
from ..logging_config import setup_logging


@app.command()
def scan(
    path: Path = typer.Argument(
        Path("."),
        help="Root of the JavaScript/TypeScript codebase",
        exists=True, file_okay=False, dir_okay=True, readable=True,
    ),
    custom_function: List[str] = typer.Option(
        [], "--custom-function", "-f",
        help="Custom tracking function, e.g. 'trackEvent' or "
        "'CustomModule.track(userId, EVENT_NAME, PROPERTIES)'. Repeatable.",
    ),
    ignore: List[str] = typer.Option(
        [], "--ignore", "-i",
        help="Glob pattern to exclude (relative to PATH). Repeatable or comma-separated.",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output file (default: tracking-plan.<format>)",
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format",
        help="Output format: yaml or json",
    ),
    stdout: bool = typer.Option(
        False, "--stdout",
        help="Print the document to stdout instead of writing a file",
    ),
    repository_url: Optional[str] = typer.Option(
        None, "--repository-url",
        help="Repository URL recorded in the output (default: git origin)",
    ),
    commit_hash: Optional[str] = typer.Option(
        None, "--commit-hash",
        help="Commit recorded in the output (default: git HEAD)",
    ),
    commit_timestamp: Optional[str] = typer.Option(
        None, "--commit-timestamp",
        help="Timestamp recorded in the output (default: now, UTC)",
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w",
        help="Parallel workers (default: CPU count, max 8)",
        min=1,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file path (TOML format)",
        exists=True, file_okay=True, dir_okay=False, readable=True,
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Also append logs to this file",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only log errors",
    ),
):
    """Scan a codebase and write its analytics events map."""
    overrides = {
        "output": str(output) if output is not None else None,
        "format": fmt,
        "workers": workers,
        "log_file": str(log_file) if log_file is not None else None,
        "verbose": verbose,
        "quiet": quiet,
    }
    if custom_function:
        overrides["custom_functions"] = list(custom_function)
    if ignore:
        overrides["ignore"] = split_multi(ignore)

    try:
        settings = load_config(config_file=config, **overrides)
        setup_logging(settings.verbosity, settings.log_file)
        result, _text = run(
            path,
            config=settings,
            stdout=stdout,
            repository_url=repository_url,
            commit_hash=commit_hash,
            commit_timestamp=commit_timestamp,
        )
    except TrackscanError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if settings.verbosity != "quiet" and not stdout:
        console.print(
            f"[green]Found {len(result.events)} events[/green] "
            f"in {result.files_scanned} files"
            + (f" [yellow]({len(result.warnings)} warnings)[/yellow]" if result.warnings else "")
        )
