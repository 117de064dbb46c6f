"""Constant resolution for event names.

Resolves identifiers and member chains to string literals when they refer to
local ``const`` declarations::

    const EVENTS = Object.freeze({ CHECKOUT: { DONE: 'checkout_done' } });
    analytics.track(EVENTS.CHECKOUT.DONE);   // -> "checkout_done"

Resolution is all-or-nothing: a chain that passes through a call, a dynamic
index or an unknown binding is unresolved, never partially resolved.

Declaration lookup is an injected capability (``DeclarationLookup``).
``ScopeIndex`` implements it over a tree-sitter syntax tree.
Names imported from relative paths (``import { EVENTS } from "./events"``)
resolve through an optional ``ModuleLookup``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from .nodes import (
    FUNCTION_NODE_TYPES,
    Node,
    find_property,
    named_children,
    node_text,
    strip_wrappers,
    string_value,
    unwrap,
)

# Aliases followed before giving up (const A = B; const B = C; ...)
MAX_ALIAS_DEPTH = 8

_BLOCK_TYPES = frozenset({"program", "statement_block", "class_body", "switch_case", "switch_default"})


class DeclarationLookup(Protocol):
    """Scope analysis capability used by the resolver."""

    def resolve_declaration(self, name: str, at: Node) -> Optional[Node]:
        """Return the ``const`` declarator (or enum) binding ``name`` at ``at``."""
        ...


@dataclass(frozen=True)
class ImportBinding:
    """A name bound by an ``import`` statement.

    ``name`` is the exported name: ``"default"`` for default imports and
    ``"*"`` for namespace imports.
    """

    source: str
    name: str


class ModuleLookup(Protocol):
    """Cross-module capability: follows imports to sibling source files."""

    def resolve_import(self, importer: Path, binding: ImportBinding) -> Optional[Node]:
        """Declaration exported under ``binding.name`` by ``binding.source``."""
        ...

    def scope_for(self, root: Node) -> Optional[ScopeIndex]:
        """Scope index of the module whose syntax tree has ``root``."""
        ...


Binding = Union[Node, ImportBinding, None]


class ScopeIndex:
    """Lexical scope lookup over one tree-sitter syntax tree.

    Walks outward from the use site. A binding that is not a ``const`` (let,
    var, function, class, parameter) shadows outer declarations and makes the
    name unresolvable.

    With ``modules`` set, relative imports are followed into the files they
    name, and lookups that start in another module's tree are handed to
    that module's index.
    """

    def __init__(
        self,
        root: Optional[Node] = None,
        path: Optional[Path] = None,
        modules: Optional[ModuleLookup] = None,
    ) -> None:
        self.root = root
        self.path = path
        self._modules = modules
        self._cache: dict[tuple[int, int, str], dict[str, Binding]] = {}

    def resolve_declaration(self, name: str, at: Node) -> Optional[Node]:
        ancestors = []
        node = at.parent
        while node is not None:
            ancestors.append(node)
            node = node.parent
        if not ancestors:
            return None

        top = ancestors[-1]
        if self._modules is not None and self.root is not None and top != self.root:
            owner = self._modules.scope_for(top)
            if owner is None:
                return None
            return owner._lookup(name, ancestors)
        return self._lookup(name, ancestors)

    def top_level_binding(self, name: str) -> Binding:
        """Module-level binding for ``name`` (requires ``root``)."""
        if self.root is None:
            return None
        return self._bindings(self.root).get(name)

    def follow_import(self, binding: Binding) -> Optional[Node]:
        """Declaration behind a binding, following it across modules."""
        if not isinstance(binding, ImportBinding):
            return binding
        if self._modules is None or self.path is None:
            return None
        return self._modules.resolve_import(self.path, binding)

    def _lookup(self, name: str, ancestors: list[Node]) -> Optional[Node]:
        for node in ancestors:
            if node.type in _BLOCK_TYPES:
                bindings = self._bindings(node)
                if name in bindings:
                    return self.follow_import(bindings[name])
            elif node.type in FUNCTION_NODE_TYPES or node.type == "catch_clause":
                if name in self._parameter_names(node):
                    return None
            elif node.type in ("for_statement", "for_in_statement"):
                if name in self._loop_bindings(node):
                    return None
        return None

    # ── Binding collection ─────────────────────────────────────

    def _bindings(self, block: Node) -> dict[str, Binding]:
        key = (block.start_byte, block.end_byte, block.type)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        bindings: dict[str, Binding] = {}
        for stmt in named_children(block):
            if stmt.type == "export_statement":
                decl = stmt.child_by_field_name("declaration")
                if decl is None:
                    continue
                stmt = decl
            self._collect_statement(stmt, bindings)
        self._cache[key] = bindings
        return bindings

    @staticmethod
    def _collect_statement(stmt: Node, bindings: dict[str, Binding]) -> None:
        if stmt.type in ("lexical_declaration", "variable_declaration"):
            is_const = stmt.type == "lexical_declaration" and node_text(stmt.children[0]) == "const"
            for declarator in named_children(stmt):
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                bindings[node_text(name_node)] = declarator if is_const else None
        elif stmt.type == "enum_declaration":
            name_node = stmt.child_by_field_name("name")
            if name_node is not None:
                bindings[node_text(name_node)] = stmt
        elif stmt.type == "import_statement":
            bindings.update(import_bindings(stmt))
        elif stmt.type in (
            "function_declaration",
            "generator_function_declaration",
            "class_declaration",
        ):
            name_node = stmt.child_by_field_name("name")
            if name_node is not None:
                bindings[node_text(name_node)] = None

    @staticmethod
    def _parameter_names(func: Node) -> set[str]:
        names: set[str] = set()
        single = func.child_by_field_name("parameter")
        if single is not None and single.type == "identifier":
            names.add(node_text(single))
        params = func.child_by_field_name("parameters")
        if params is not None:
            names.update(_identifiers_in(params))
        if func.type == "catch_clause":
            param = func.child_by_field_name("parameter")
            if param is not None:
                names.update(_identifiers_in(param))
        return names

    @staticmethod
    def _loop_bindings(loop: Node) -> set[str]:
        names: set[str] = set()
        for field in ("initializer", "left"):
            child = loop.child_by_field_name(field)
            if child is not None:
                names.update(_identifiers_in(child))
        return names


def _identifiers_in(node: Node) -> set[str]:
    """Binding names inside a parameter list or pattern."""
    names: set[str] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in ("identifier", "shorthand_property_identifier_pattern"):
            names.add(node_text(current))
            continue
        # Default values and type annotations do not bind names
        if current.type in ("type_annotation", "number", "string"):
            continue
        if current.type in ("assignment_pattern", "object_assignment_pattern"):
            left = current.child_by_field_name("left")
            if left is not None:
                stack.append(left)
            continue
        if current.type in ("required_parameter", "optional_parameter"):
            pattern = current.child_by_field_name("pattern")
            if pattern is not None:
                stack.append(pattern)
            continue
        if current.type == "pair_pattern":
            value = current.child_by_field_name("value")
            if value is not None:
                stack.append(value)
            continue
        stack.extend(current.named_children)
    return names


def import_bindings(stmt: Node) -> dict[str, Binding]:
    """Local names bound by an ``import`` statement."""
    source = string_value(stmt.child_by_field_name("source"))
    bindings: dict[str, Binding] = {}
    for clause in named_children(stmt):
        if clause.type != "import_clause":
            continue
        for child in named_children(clause):
            if child.type == "identifier":
                bindings[node_text(child)] = _import(source, "default")
            elif child.type == "namespace_import":
                for ident in named_children(child):
                    if ident.type == "identifier":
                        bindings[node_text(ident)] = _import(source, "*")
            elif child.type == "named_imports":
                for spec in named_children(child):
                    if spec.type != "import_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    local = node_text(alias or name_node)
                    if local:
                        bindings[local] = _import(source, export_name(name_node))
    return bindings


def export_name(node: Optional[Node]) -> Optional[str]:
    """Name in an import or export specifier (identifier or string)."""
    if node is None:
        return None
    if node.type == "string":
        return string_value(node)
    return node_text(node) or None


def _import(source: Optional[str], name: Optional[str]) -> Binding:
    # An import we cannot describe still shadows outer names
    if source is None or name is None:
        return None
    return ImportBinding(source, name)


class ConstantResolver:
    """Resolve expressions to compile-time-known strings and object literals."""

    def __init__(self, lookup: DeclarationLookup) -> None:
        self._lookup = lookup

    def resolve_string(self, node: Optional[Node]) -> Optional[str]:
        """String value of a literal, constant identifier or member chain."""
        return self._string(node, 0)

    def resolve_object(self, node: Optional[Node]) -> Optional[Node]:
        """Object literal node denoted by ``node``, following constants."""
        value = self.resolve_expression(node)
        if value is not None and value.type == "object":
            return value
        return None

    def resolve_expression(self, node: Optional[Node]) -> Optional[Node]:
        """Follow identifiers and member chains to the expression they denote.

        Returns the unwrapped node itself when it is not a reference.
        """
        return self._expression(node, 0)

    # ── Internals ──────────────────────────────────────────────

    def _string(self, node: Optional[Node], depth: int) -> Optional[str]:
        value = self._expression(node, depth)
        return string_value(value)

    def _expression(self, node: Optional[Node], depth: int) -> Optional[Node]:
        node = unwrap(node)
        while node is not None and _is_reference(node):
            if depth > MAX_ALIAS_DEPTH:
                return None
            node = unwrap(self._follow(node, depth))
            depth += 1
        return node

    def _follow(self, node: Node, depth: int) -> Optional[Node]:
        if node.type in ("identifier", "shorthand_property_identifier"):
            return self._initializer(node_text(node), node)

        chain = _member_chain(node)
        if chain is None:
            return None
        root, keys = chain

        value = self._initializer(node_text(root), root)
        for key in keys:
            obj = self._expression(value, depth + 1)
            if obj is None or obj.type not in ("object", "enum_body"):
                return None
            value = find_property(obj, key)
            if value is None:
                return None
        return value

    def _initializer(self, name: str, at: Node) -> Optional[Node]:
        declaration = self._lookup.resolve_declaration(name, at)
        if declaration is None:
            return None
        if declaration.type == "enum_declaration":
            return declaration.child_by_field_name("body")
        return declaration.child_by_field_name("value")


def _is_reference(node: Node) -> bool:
    return node.type in (
        "identifier",
        "shorthand_property_identifier",
        "member_expression",
        "subscript_expression",
    )


def _member_chain(node: Node) -> Optional[tuple[Node, list[str]]]:
    """Split ``A.B['C']`` into (A, ["B", "C"]); None for any dynamic segment."""
    keys: list[str] = []
    current: Optional[Node] = node
    while current is not None and current.type in ("member_expression", "subscript_expression"):
        if current.type == "member_expression":
            prop = current.child_by_field_name("property")
            if prop is None or prop.type != "property_identifier":
                return None
            keys.append(node_text(prop))
        else:
            key = string_value(strip_wrappers(current.child_by_field_name("index")))
            if key is None:
                return None
            keys.append(key)
        current = strip_wrappers(current.child_by_field_name("object"))

    if current is None or current.type != "identifier":
        return None
    keys.reverse()
    return current, keys
