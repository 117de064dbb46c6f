"""Property schema inference from object literals.

    analytics.track('Order Completed', {
        order_id: 'o-1',            -> string
        total: 99.5,                -> number
        items: [{ sku: 'a' }],      -> array, items: object
        address: { city: 'SF' },    -> object, properties: {city: string}
        products: productsList,     -> any
    })
"""

from __future__ import annotations

from typing import Optional

from ..models import PropertySchema
from .constants import ConstantResolver
from .nodes import (
    FUNCTION_NODE_TYPES,
    Node,
    named_children,
    node_text,
    property_key,
    strip_wrappers,
    unwrap,
)

_LITERAL_TYPES = {
    "string": "string",
    "template_string": "string",
    "number": "number",
    "true": "boolean",
    "false": "boolean",
    "null": "null",
    "undefined": "undefined",
    "regex": "object",
}


class PropertyExtractor:
    """Builds PropertySchema maps, following constants through a resolver."""

    def __init__(self, resolver: ConstantResolver) -> None:
        self._resolver = resolver

    def extract(self, node: Optional[Node], exclude: tuple[str, ...] = ()) -> dict[str, PropertySchema]:
        """Schemas for each static key of the object literal ``node`` denotes.

        Args:
            node: Object literal, or a reference to a ``const`` object literal
            exclude: Keys to leave out (e.g. the ``event`` key of a data-layer push)

        Returns:
            Ordered mapping of key to schema; empty when ``node`` is not an object
        """
        obj = self._resolver.resolve_object(node)
        if obj is None:
            return {}
        return self._object_properties(obj, exclude, seen=set())

    def infer(self, node: Optional[Node]) -> PropertySchema:
        """Schema for a single value expression."""
        return self._infer(node, seen=set())

    # ── Internals ──────────────────────────────────────────────

    def _object_properties(
        self, obj: Node, exclude: tuple[str, ...], seen: set[tuple[int, int]]
    ) -> dict[str, PropertySchema]:
        key = (obj.start_byte, obj.end_byte)
        if key in seen:
            return {}
        seen = seen | {key}

        properties: dict[str, PropertySchema] = {}
        for child in named_children(obj):
            if child.type == "pair":
                name = property_key(child)
                if name is None or name in exclude:
                    continue
                properties[name] = self._infer(child.child_by_field_name("value"), seen)
            elif child.type == "shorthand_property_identifier":
                name = node_text(child)
                if name in exclude:
                    continue
                properties[name] = self._infer_reference(child, seen)
            elif child.type == "method_definition":
                name = property_key(child)
                if name is None or name in exclude:
                    continue
                properties[name] = PropertySchema(type="function")
            elif child.type == "spread_element":
                spread = named_children(child)
                target = self._resolver.resolve_object(spread[0]) if spread else None
                if target is not None:
                    for name, schema in self._object_properties(target, exclude, seen).items():
                        properties.setdefault(name, schema)
        return properties

    def _infer(self, node: Optional[Node], seen: set[tuple[int, int]]) -> PropertySchema:
        node = unwrap(node)
        if node is None:
            return PropertySchema(type="any")

        literal = _LITERAL_TYPES.get(node.type)
        if literal is not None:
            if node.type == "template_string":
                return PropertySchema(type="string")
            return PropertySchema(type=literal)

        if node.type == "object":
            return PropertySchema(type="object", properties=self._object_properties(node, (), seen))

        if node.type == "array":
            elements = named_children(node)
            if not elements:
                return PropertySchema(type="array", items=PropertySchema(type="any"))
            first = self._infer(elements[0], seen)
            return PropertySchema(type="array", items=PropertySchema(type=first.type))

        if node.type in FUNCTION_NODE_TYPES or node.type == "class":
            return PropertySchema(type="function" if node.type != "class" else "object")

        if node.type == "unary_expression":
            return PropertySchema(type=_unary_type(node))

        if node.type in ("identifier", "member_expression", "subscript_expression"):
            return self._infer_reference(node, seen)

        return PropertySchema(type="any")

    def _infer_reference(self, node: Node, seen: set[tuple[int, int]]) -> PropertySchema:
        """Constants get the type of their value; anything else is ``any``."""
        if node.type == "identifier" and node_text(node) == "undefined":
            return PropertySchema(type="undefined")
        value = self._resolver.resolve_expression(node)
        if value is None or value.type in ("identifier", "member_expression"):
            return PropertySchema(type="any")
        if value.type in _LITERAL_TYPES and value.type not in ("null", "undefined"):
            return self._infer(value, seen)
        return PropertySchema(type="any")


def _unary_type(node: Node) -> str:
    operator = node.child_by_field_name("operator")
    op = node_text(operator) if operator is not None else ""
    argument = strip_wrappers(node.child_by_field_name("argument"))
    if op in ("-", "+", "~"):
        return "number" if argument is not None and argument.type == "number" else "any"
    if op == "!":
        return "boolean"
    if op == "typeof":
        return "string"
    if op == "void":
        return "undefined"
    return "any"
