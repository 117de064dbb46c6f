"""Output formatters for the events map."""

from pathlib import Path
from typing import Optional, Union

from ..exceptions import FileAccessError, InvalidConfigError
from ..logging_config import get_logger
from ..models import EventsMap, RepoDetails
from .base import SCHEMA_VERSION, BaseFormatter, build_document
from .json_formatter import JsonFormatter
from .yaml_formatter import YamlFormatter

logger = get_logger(__name__)

FORMATTERS = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "yaml", "json"

    Raises:
        InvalidConfigError: If name is not recognized
    """
    cls = FORMATTERS.get(name)
    if cls is None:
        raise InvalidConfigError(
            "format", name, f"choose from: {', '.join(sorted(FORMATTERS))}"
        )
    return cls()


def emit(events: EventsMap, repo: RepoDetails, fmt: str = "yaml") -> str:
    """Serialize the events map without side effects.

    Raises:
        InvalidConfigError: If ``fmt`` is unknown
    """
    return get_formatter(fmt).format(events, repo)


def write_schema(
    events: EventsMap,
    repo: RepoDetails,
    fmt: str = "yaml",
    output_path: Optional[Union[str, Path]] = None,
    stdout: bool = False,
) -> str:
    """Serialize the events map and write it to a file and/or stdout.

    Returns:
        The serialized document

    Raises:
        InvalidConfigError: If ``fmt`` is unknown
        FileAccessError: If ``output_path`` cannot be written
    """
    text = emit(events, repo, fmt)

    if stdout:
        print(text, end="")

    if output_path is not None:
        path = Path(output_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FileAccessError(path, f"Cannot write output: {e}")
        logger.info(f"Wrote {len(events)} events to {path}")

    return text


__all__ = [
    "BaseFormatter",
    "FORMATTERS",
    "JsonFormatter",
    "SCHEMA_VERSION",
    "YamlFormatter",
    "build_document",
    "emit",
    "get_formatter",
    "write_schema",
]
