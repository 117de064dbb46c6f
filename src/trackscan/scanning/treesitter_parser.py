"""Tree-sitter parser wrapper.

Provides one interface for parsing JavaScript, TypeScript and TSX.
Handles a missing tree-sitter dependency gracefully.

Usage:
    if TREE_SITTER_AVAILABLE:
        parser = TreeSitterParser()
        tree = parser.parse(code_bytes, "typescript")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..detection.nodes import Node, line_of
from ..logging_config import get_logger

logger = get_logger(__name__)

# Try to import tree-sitter
TREE_SITTER_AVAILABLE = False
_tree_sitter_module: Any = None
_language_modules: dict[str, Any] = {}

try:
    import tree_sitter as _tree_sitter_module  # type: ignore[no-redef]

    TREE_SITTER_AVAILABLE = True

    # Try to import language grammars
    try:
        import tree_sitter_javascript

        _language_modules["javascript"] = tree_sitter_javascript
    except ImportError:
        pass

    try:
        import tree_sitter_typescript

        _language_modules["typescript"] = tree_sitter_typescript
        # TSX is bundled with tree-sitter-typescript, store it separately
        _language_modules["tsx"] = tree_sitter_typescript
    except ImportError:
        pass

except ImportError:
    TREE_SITTER_AVAILABLE = False


if TYPE_CHECKING:
    # Structural type for the parsed tree
    class Tree:
        root_node: Node


def get_supported_languages() -> list[str]:
    """Get list of languages with installed grammars."""
    if not TREE_SITTER_AVAILABLE:
        return []
    return list(_language_modules.keys())


class TreeSitterParser:
    """Wrapper around tree-sitter for JavaScript-family parsing.

    Parsers are not thread-safe; create one TreeSitterParser per thread.
    Check TREE_SITTER_AVAILABLE before using, or check if parse() returns None.
    """

    def __init__(self) -> None:
        """Initialize parsers for the available grammars."""
        self._parsers: dict[str, Any] = {}
        self._languages: dict[str, Any] = {}

        if not TREE_SITTER_AVAILABLE:
            return

        for lang_name, lang_module in _language_modules.items():
            try:
                # tree-sitter-typescript exposes language_typescript() / language_tsx()
                lang_fn = getattr(lang_module, f"language_{lang_name}", None)
                if lang_fn is None:
                    lang_fn = getattr(lang_module, "language", None)
                if lang_fn is None:
                    continue

                # tree-sitter >= 0.23 returns PyCapsule; wrap in Language()
                lang_obj = _tree_sitter_module.Language(lang_fn())
                self._parsers[lang_name] = _tree_sitter_module.Parser(lang_obj)
                self._languages[lang_name] = lang_obj
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Cannot load {lang_name} grammar: {e}")

    def parse(self, code: bytes, language: str) -> Tree | None:
        """Parse code and return syntax tree.

        Args:
            code: Source code as bytes
            language: Grammar name ("javascript", "typescript", "tsx")

        Returns:
            Tree object, or None if the language is not supported
            or tree-sitter is not available
        """
        parser = self._parsers.get(language)
        if parser is None:
            return None
        result: Tree | None = parser.parse(code)
        return result

    def is_language_supported(self, language: str) -> bool:
        """Check if a language is supported."""
        return language in self._parsers

    def supported_languages(self) -> list[str]:
        """Grammars this parser loaded."""
        return list(self._parsers)


def first_error_line(root: Node) -> int | None:
    """1-based line of the first ERROR or MISSING node, if any."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return line_of(node)
        if node.has_error:
            stack.extend(reversed(node.children))
    return None
