"""
Logging configuration for trackscan.

Scan progress and per-file warnings ("src/app.ts: syntax error near line 4")
go to stderr through a rich handler, so ``--stdout`` output stays
machine-readable. The level comes from ``ScanConfig.verbosity``; source
paths and line numbers in log messages are highlighted.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

_THEME = Theme(
    {
        "trackscan.path": "bold cyan",
        "trackscan.line": "yellow",
        "trackscan.event": "green",
    }
)


class ScanLogHighlighter(RegexHighlighter):
    """Highlights source file paths, line numbers and quoted event names."""

    base_style = "trackscan."
    highlights = [
        r"(?P<path>[\w.@/-]+\.[cm]?[jt]sx?)\b",
        r"\bline (?P<line>\d+)",
        r"(?P<event>'[^']*')",
    ]


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for a scan.

    Args:
        verbosity: "quiet" (errors only), "normal" (warnings) or
            "verbose" (per-file debug output with timestamps)
        log_file: Optional file path to append plain-text logs to

    Returns:
        Configured logger instance for trackscan
    """
    level = LEVELS.get(verbosity, logging.WARNING)
    verbose = level == logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True, theme=_THEME),
            highlighter=ScanLogHighlighter(),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=verbose,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger("trackscan")
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``trackscan`` namespace (the root one when ``name`` is None)."""
    if name is None:
        return logging.getLogger("trackscan")

    if not name.startswith("trackscan"):
        name = f"trackscan.{name}"

    return logging.getLogger(name)
