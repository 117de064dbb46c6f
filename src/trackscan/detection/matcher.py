"""Call-site classification.

Given one ``call_expression`` node, decide whether it is a tracking call and,
if so, which provider it targets, its event name and its properties.

Match order, first match wins:
    1. custom signatures
    2. data-layer pushes (``dataLayer.push({event: ...})``)
    3. bare function providers (``gtag``)
    4. member-call providers (``analytics.track``, ``window.DD_RUM.addAction``)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..logging_config import get_logger
from ..models import PropertySchema
from .constants import ConstantResolver
from .nodes import (
    Node,
    call_arguments,
    find_property,
    line_of,
    member_names,
    node_text,
    strip_wrappers,
)
from .properties import PropertyExtractor
from .providers import STRUCT_EVENT, ProviderDescriptor, ProviderRegistry, default_registry
from .signatures import CustomFunctionSignature

logger = get_logger(__name__)

CUSTOM_SOURCE = "custom"
DATA_LAYER_SOURCE = "gtm"
DATA_LAYER_NAME = "dataLayer"
STRUCT_EVENT_BUILDER = "buildStructEvent"


@dataclass(frozen=True)
class Match:
    """A classified tracking call."""

    source: str
    event_name: str
    properties: dict[str, PropertySchema] = field(default_factory=dict)


class CallSiteMatcher:
    """Classifies call expressions against providers and custom signatures.

    Stateless after construction, so one instance is shared by all walker
    threads.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        signatures: Iterable[CustomFunctionSignature] = (),
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.signatures: tuple[CustomFunctionSignature, ...] = tuple(signatures)

    def match(self, node: Node, resolver: ConstantResolver) -> Optional[Match]:
        """Classify ``node``; None when it is not a resolvable tracking call."""
        if node.type != "call_expression":
            return None
        callee = strip_wrappers(node.child_by_field_name("function"))
        if callee is None:
            return None

        args = call_arguments(node)
        extractor = PropertyExtractor(resolver)

        signature = self._match_signature(callee)
        if signature is not None:
            return self._custom(node, signature, args, resolver, extractor)

        if _is_data_layer_push(callee):
            return self._data_layer(node, args, resolver, extractor)

        descriptor = self._match_provider(callee)
        if descriptor is None:
            return None
        return self._provider(node, descriptor, args, resolver, extractor)

    # ── Classification ─────────────────────────────────────────

    def _match_signature(self, callee: Node) -> Optional[CustomFunctionSignature]:
        if not self.signatures:
            return None
        chain = _callee_chain(callee)
        if chain is None:
            return None
        for signature in self.signatures:
            if signature.name_parts == chain:
                return signature
        return None

    def _match_provider(self, callee: Node) -> Optional[ProviderDescriptor]:
        if callee.type == "identifier":
            return self.registry.by_function(node_text(callee))

        method, obj = member_names(callee)
        obj = strip_wrappers(obj)
        if method is None or obj is None:
            return None

        if obj.type == "identifier":
            return self.registry.by_member(method, node_text(obj))

        # window.DD_RUM.addAction: one level of nesting, rooted at a plain name
        if obj.type == "member_expression":
            inner, root = member_names(obj)
            root = strip_wrappers(root)
            if inner is not None and root is not None and root.type in ("identifier", "this"):
                return self.registry.by_member(method, inner)
        return None

    # ── Extraction ─────────────────────────────────────────────

    def _provider(
        self,
        node: Node,
        descriptor: ProviderDescriptor,
        args: list[Node],
        resolver: ConstantResolver,
        extractor: PropertyExtractor,
    ) -> Optional[Match]:
        if len(args) < descriptor.min_args:
            return None
        if descriptor.command is not None and resolver.resolve_string(args[0]) != descriptor.command:
            return None

        if descriptor.extraction == STRUCT_EVENT:
            return self._struct_event(node, descriptor, args, resolver, extractor)

        event_name = resolver.resolve_string(args[descriptor.event_arg])
        if not event_name:
            _log_unresolved(node, descriptor.name)
            return None

        properties: dict[str, PropertySchema] = {}
        if descriptor.properties_arg is not None and descriptor.properties_arg < len(args):
            properties = extractor.extract(args[descriptor.properties_arg])
        return Match(descriptor.name, event_name, properties)

    def _struct_event(
        self,
        node: Node,
        descriptor: ProviderDescriptor,
        args: list[Node],
        resolver: ConstantResolver,
        extractor: PropertyExtractor,
    ) -> Optional[Match]:
        """``tracker.track(buildStructEvent({action: name, ...}))``."""
        built = resolver.resolve_expression(args[0])
        if built is None or built.type != "call_expression":
            return None
        builder = strip_wrappers(built.child_by_field_name("function"))
        if builder is None or builder.type != "identifier" or node_text(builder) != STRUCT_EVENT_BUILDER:
            return None

        builder_args = call_arguments(built)
        obj = resolver.resolve_object(builder_args[0]) if builder_args else None
        if obj is None:
            return None

        event_name = resolver.resolve_string(find_property(obj, "action"))
        if not event_name:
            _log_unresolved(node, descriptor.name)
            return None
        return Match(descriptor.name, event_name, extractor.extract(obj, exclude=("action",)))

    def _data_layer(
        self,
        node: Node,
        args: list[Node],
        resolver: ConstantResolver,
        extractor: PropertyExtractor,
    ) -> Optional[Match]:
        obj = resolver.resolve_object(args[0]) if args else None
        if obj is None:
            return None
        event_name = resolver.resolve_string(find_property(obj, "event"))
        if not event_name:
            _log_unresolved(node, DATA_LAYER_SOURCE)
            return None
        return Match(DATA_LAYER_SOURCE, event_name, extractor.extract(obj, exclude=("event",)))

    def _custom(
        self,
        node: Node,
        signature: CustomFunctionSignature,
        args: list[Node],
        resolver: ConstantResolver,
        extractor: PropertyExtractor,
    ) -> Optional[Match]:
        event_index = signature.event_index
        if event_index >= len(args):
            return None
        event_name = resolver.resolve_string(args[event_index])
        if not event_name:
            _log_unresolved(node, signature.function_name)
            return None

        # Extra parameters come first and win over same-named object keys
        properties: dict[str, PropertySchema] = {}
        for index, name in signature.extra_parameters:
            if index < len(args):
                properties[name] = extractor.infer(args[index])

        props_index = signature.properties_index
        if props_index is not None and props_index < len(args):
            for name, schema in extractor.extract(args[props_index]).items():
                properties.setdefault(name, schema)
        return Match(CUSTOM_SOURCE, event_name, properties)


def _callee_chain(callee: Node) -> Optional[tuple[str, ...]]:
    """``a.b.c`` -> ("a", "b", "c"); None for computed or call segments."""
    parts: list[str] = []
    current: Optional[Node] = callee
    while current is not None and current.type == "member_expression":
        prop = current.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return None
        parts.append(node_text(prop))
        current = strip_wrappers(current.child_by_field_name("object"))

    if current is None or current.type not in ("identifier", "this"):
        return None
    parts.append(node_text(current))
    parts.reverse()
    return tuple(parts)


def _is_data_layer_push(callee: Node) -> bool:
    method, obj = member_names(callee)
    obj = strip_wrappers(obj)
    if method != "push" or obj is None:
        return False
    if obj.type == "identifier":
        return node_text(obj) == DATA_LAYER_NAME
    if obj.type == "member_expression":
        name, root = member_names(obj)
        root = strip_wrappers(root)
        return name == DATA_LAYER_NAME and root is not None and root.type == "identifier"
    return False


def _log_unresolved(node: Node, source: str) -> None:
    logger.debug(f"Unresolved event name for {source} call at line {line_of(node)}")
