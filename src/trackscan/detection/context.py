"""Enclosing function names for call sites.

Named contexts, closest first:
    function foo() {}                 -> foo
    const foo = () => {}              -> foo
    class A { foo() {} }              -> foo
    const obj = { foo: () => {} }     -> foo
    class A { foo = () => {} }        -> foo

React hooks are composed with the component around them, so a call inside
``useEffect`` in ``function Dashboard()`` is reported as
``Dashboard.useEffect``.
"""

from __future__ import annotations

from typing import Optional

from .nodes import FUNCTION_NODE_TYPES, Node, node_text, property_key, strip_wrappers

REACT_HOOKS = frozenset(
    {
        "useEffect",
        "useLayoutEffect",
        "useInsertionEffect",
        "useCallback",
        "useMemo",
        "useReducer",
        "useState",
        "useImperativeHandle",
        "useDeferredValue",
        "useTransition",
    }
)


def enclosing_function_name(node: Node) -> Optional[str]:
    """Name of the function containing ``node``; None at module level."""
    hook: Optional[str] = None
    current = node.parent
    while current is not None:
        if hook is None:
            hook = _hook_name(current)

        name = _function_name(current)
        if name is not None:
            return f"{name}.{hook}" if hook is not None else name
        current = current.parent

    return hook


def _hook_name(node: Node) -> Optional[str]:
    if node.type != "call_expression":
        return None
    callee = node.child_by_field_name("function")
    if callee is not None and callee.type == "identifier" and node_text(callee) in REACT_HOOKS:
        return node_text(callee)
    return None


def _function_name(node: Node) -> Optional[str]:
    if node.type in ("function_declaration", "generator_function_declaration"):
        name = node.child_by_field_name("name")
        return node_text(name) if name is not None else "anonymous"

    if node.type == "method_definition":
        return property_key(node) or "anonymous"

    if node.type == "variable_declarator":
        name = node.child_by_field_name("name")
        if name is not None and name.type == "identifier" and _is_function(node.child_by_field_name("value")):
            return node_text(name)
        return None

    if node.type == "pair":
        if _is_function(node.child_by_field_name("value")):
            return property_key(node) or "anonymous"
        return None

    if node.type in ("public_field_definition", "field_definition"):
        value = node.child_by_field_name("value")
        if _is_function(value):
            name = node.child_by_field_name("name") or node.child_by_field_name("property")
            return node_text(name) or "anonymous"
        return None

    return None


def _is_function(node: Optional[Node]) -> bool:
    node = strip_wrappers(node)
    return node is not None and node.type in FUNCTION_NODE_TYPES
