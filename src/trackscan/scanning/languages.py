"""Language table: the single source of truth for scannable file types.

Adding a language:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. Install its tree-sitter grammar and register it in treesitter_parser.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class LanguageConfig:
    """Everything the walker needs to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Grammar name passed to TreeSitterParser.parse()
    grammar: str


LANGUAGES: dict[str, LanguageConfig] = {
    "javascript": LanguageConfig(
        name="javascript",
        # JSX is part of the JavaScript grammar
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        grammar="javascript",
    ),
    "typescript": LanguageConfig(
        name="typescript",
        extensions=(".ts", ".mts", ".cts"),
        grammar="typescript",
    ),
    "tsx": LanguageConfig(
        name="tsx",
        extensions=(".tsx",),
        grammar="tsx",
    ),
}

# Directory names never descended into, in addition to hidden entries
SKIP_DIRS: tuple[str, ...] = ("node_modules", "coverage", "temp", "tmp", "log")


# Extension to language mapping (built from LANGUAGES)
_EXTENSION_TO_LANGUAGE: dict[str, str] = {}
for _lang_name, _cfg in LANGUAGES.items():
    for _ext in _cfg.extensions:
        _EXTENSION_TO_LANGUAGE[_ext] = _lang_name


def supported_extensions() -> frozenset[str]:
    return frozenset(_EXTENSION_TO_LANGUAGE)


def detect_language(filepath: Union[str, Path]) -> str:
    """Detect language from file extension.

    Returns:
        Language name (e.g., "javascript", "tsx") or "unknown"
    """
    ext = Path(filepath).suffix.lower()
    return _EXTENSION_TO_LANGUAGE.get(ext, "unknown")


# Suffixes tried, in order, when an import specifier omits the extension
MODULE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mts", ".cts", ".mjs", ".cjs")

# TypeScript sources are often imported by their compiled name ("./events.js")
COMPILED_SUFFIXES: tuple[str, ...] = (".js", ".jsx", ".mjs", ".cjs")
