"""CLI entry point - registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import out

app = typer.Typer(
    name="trackscan",
    help="trackscan - find analytics tracking calls in JavaScript/TypeScript code",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        out.print(f"trackscan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version",
        help="Show version and exit",
        callback=_version_callback, is_eager=True,
    ),
):
    """Detect analytics events in a JavaScript/TypeScript codebase."""


# Import subcommands to register them
from .scan import scan as _scan  # noqa: F401, E402
from .providers import providers as _providers  # noqa: F401, E402
