"""Shared CLI helpers."""

from rich.console import Console

# Logs and messages go to stderr so --stdout output stays clean
console = Console(stderr=True)

# Tables and version output
out = Console()


def split_multi(values: list[str]) -> list[str]:
    """Flatten repeated and comma-separated option values."""
    result = []
    for value in values:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result
