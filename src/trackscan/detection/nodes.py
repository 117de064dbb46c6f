"""Small helpers over tree-sitter JavaScript/TypeScript nodes.

The grammar node names used here are shared by tree-sitter-javascript and
tree-sitter-typescript (including TSX).
"""

from __future__ import annotations

import re
from typing import Optional, Protocol


class Node(Protocol):
    """Structural type for the parts of the tree-sitter node API we use."""

    text: Optional[bytes]
    type: str
    start_point: tuple[int, int]
    end_point: tuple[int, int]
    start_byte: int
    end_byte: int
    children: list[Node]
    named_children: list[Node]
    parent: Optional[Node]
    has_error: bool
    is_missing: bool

    def child_by_field_name(self, name: str, /) -> Optional[Node]: ...


FUNCTION_NODE_TYPES = frozenset(
    {
        "arrow_function",
        "function",
        "function_expression",
        "function_declaration",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
    }
)

# Wrappers that do not change the value of the wrapped expression
_TRANSPARENT_WRAPPERS = frozenset(
    {
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
        "type_assertion",
    }
)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)", re.DOTALL)
_MAX_CODE_POINT = 0x10FFFF


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def named_children(node: Node) -> list[Node]:
    """Named children without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def line_of(node: Node) -> int:
    """1-based line number of a node."""
    return node.start_point[0] + 1


def _unescape(raw: str) -> Optional[str]:
    """Decode JS escape sequences; None for out-of-range or unpaired code points."""

    def replace(match: re.Match) -> str:
        seq = match.group(1)
        if seq.startswith("u{"):
            code = int(seq[2:-1], 16)
        elif seq.startswith("u") and len(seq) == 5:
            code = int(seq[1:], 16)
        elif seq.startswith("x") and len(seq) == 3:
            code = int(seq[1:], 16)
        elif seq in ("\n", "\r\n"):
            return ""
        else:
            return _ESCAPES.get(seq, seq)
        if code > _MAX_CODE_POINT:
            raise ValueError(f"code point {code:#x} out of range")
        return chr(code)

    try:
        decoded = _ESCAPE_RE.sub(replace, raw)
    except ValueError:
        return None
    # '🎉' arrives as two surrogates; UTF-16 round-trip joins the pair
    try:
        return decoded.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError:
        return None


def string_value(node: Optional[Node]) -> Optional[str]:
    """Value of a string literal, or of a template string without substitutions.

    None when the literal holds an escape that is not a valid code point.
    """
    if node is None:
        return None
    if node.type == "string":
        return _unescape(node_text(node)[1:-1])
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return _unescape(node_text(node)[1:-1])
    return None


def strip_wrappers(node: Optional[Node]) -> Optional[Node]:
    """Remove parentheses and TypeScript-only wrappers (``as const``, ``!``)."""
    while node is not None and node.type in _TRANSPARENT_WRAPPERS:
        inner = named_children(node)
        if not inner:
            return None
        node = inner[0]
    return node


def is_object_freeze(node: Node) -> bool:
    """True for ``Object.freeze(...)`` calls."""
    if node.type != "call_expression":
        return False
    callee = node.child_by_field_name("function")
    if callee is None or callee.type != "member_expression":
        return False
    obj = callee.child_by_field_name("object")
    prop = callee.child_by_field_name("property")
    return (
        obj is not None
        and obj.type == "identifier"
        and node_text(obj) == "Object"
        and node_text(prop) == "freeze"
    )


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip wrappers and the ``Object.freeze({...})`` idiom.

    The freeze call carries no meaning beyond producing its argument.
    """
    node = strip_wrappers(node)
    while node is not None and is_object_freeze(node):
        args = call_arguments(node)
        if not args:
            return node
        node = strip_wrappers(args[0])
    return node


def call_arguments(node: Node) -> list[Node]:
    """Positional argument nodes of a call expression."""
    args = node.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        # Tagged templates carry a template_string instead of arguments
        return []
    return named_children(args)


def property_key(pair: Node) -> Optional[str]:
    """Static key of an object ``pair`` or ``method_definition``; None if computed."""
    key = pair.child_by_field_name("key") or pair.child_by_field_name("name")
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier", "private_property_identifier"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    if key.type == "number":
        return node_text(key)
    return None


def find_property(obj: Node, key: str) -> Optional[Node]:
    """Value node for ``key`` in an object literal (last definition wins)."""
    found = None
    for child in named_children(obj):
        if child.type in ("pair", "enum_assignment"):
            if property_key(child) == key:
                found = child.child_by_field_name("value")
        elif child.type == "shorthand_property_identifier":
            if node_text(child) == key:
                found = child
    return found


def member_names(callee: Node) -> tuple[Optional[str], Optional[Node]]:
    """(property name, object node) of a member expression callee."""
    if callee.type != "member_expression":
        return None, None
    prop = callee.child_by_field_name("property")
    if prop is None or prop.type not in ("property_identifier", "private_property_identifier"):
        return None, callee.child_by_field_name("object")
    return node_text(prop), callee.child_by_field_name("object")
