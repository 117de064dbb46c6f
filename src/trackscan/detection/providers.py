"""Provider registry - the single source of truth for analytics call shapes.

Adding a provider:
  1. Add a ProviderDescriptor entry to PROVIDERS below.
  2. That's it. The CallSiteMatcher picks it up through the registry.

Each descriptor is either a bare function call (``gtag(...)``) or a member
call (``analytics.track(...)``). Argument positions are fixed per provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..exceptions import RegistryError

FUNCTION_CALL = "function-call"
MEMBER_CALL = "member-call"

# Extraction strategies
POSITIONAL = "positional"
STRUCT_EVENT = "struct-event"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Everything the matcher needs to know about one provider's call shape."""

    name: str
    kind: str

    # function-call providers
    function_name: Optional[str] = None

    # member-call providers: method plus one or more object aliases
    method_name: Optional[str] = None
    object_names: tuple[str, ...] = ()

    # Argument layout
    event_arg: int = 0
    properties_arg: Optional[int] = 1
    min_args: int = 1

    # Literal that must be the first argument, e.g. gtag('event', ...)
    command: Optional[str] = None

    extraction: str = POSITIONAL

    def __post_init__(self) -> None:
        if self.kind == FUNCTION_CALL:
            if not self.function_name:
                raise RegistryError(self.name, "function-call provider needs a function_name")
        elif self.kind == MEMBER_CALL:
            if not self.method_name or not self.object_names:
                raise RegistryError(
                    self.name, "member-call provider needs a method_name and object_names"
                )
        else:
            raise RegistryError(self.name, f"unknown kind '{self.kind}'")
        if self.extraction not in (POSITIONAL, STRUCT_EVENT):
            raise RegistryError(self.name, f"unknown extraction '{self.extraction}'")


PROVIDERS: tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor(
        name="googleanalytics",
        kind=FUNCTION_CALL,
        function_name="gtag",
        command="event",
        event_arg=1,
        properties_arg=2,
        min_args=2,
    ),
    ProviderDescriptor(
        name="segment",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("analytics",),
    ),
    ProviderDescriptor(
        name="mixpanel",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("mixpanel",),
    ),
    ProviderDescriptor(
        name="amplitude",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("amplitude",),
    ),
    ProviderDescriptor(
        name="rudderstack",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("rudderanalytics",),
    ),
    ProviderDescriptor(
        name="mparticle",
        kind=MEMBER_CALL,
        method_name="logEvent",
        object_names=("mParticle", "mparticle"),
        # mParticle.logEvent(name, mParticle.EventType.X, props)
        properties_arg=2,
    ),
    ProviderDescriptor(
        name="posthog",
        kind=MEMBER_CALL,
        method_name="capture",
        object_names=("posthog",),
    ),
    ProviderDescriptor(
        name="pendo",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("pendo",),
    ),
    ProviderDescriptor(
        name="heap",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("heap",),
    ),
    ProviderDescriptor(
        name="datadog",
        kind=MEMBER_CALL,
        method_name="addAction",
        object_names=("datadogRum", "DD_RUM"),
    ),
    ProviderDescriptor(
        name="snowplow",
        kind=MEMBER_CALL,
        method_name="track",
        object_names=("tracker",),
        extraction=STRUCT_EVENT,
        properties_arg=None,
    ),
)


class ProviderRegistry:
    """Immutable lookup over provider descriptors.

    Built once and passed explicitly to the matcher. Construction fails with
    RegistryError when two descriptors claim the same call shape.
    """

    def __init__(self, descriptors: Iterable[ProviderDescriptor]) -> None:
        self._descriptors: tuple[ProviderDescriptor, ...] = tuple(descriptors)
        self._by_function: dict[str, ProviderDescriptor] = {}
        self._by_member: dict[tuple[str, str], ProviderDescriptor] = {}
        names: set[str] = set()

        for desc in self._descriptors:
            if desc.name in names:
                raise RegistryError(desc.name, "duplicate provider name")
            names.add(desc.name)

            if desc.kind == FUNCTION_CALL:
                assert desc.function_name is not None
                owner = self._by_function.get(desc.function_name)
                if owner is not None:
                    raise RegistryError(
                        desc.name,
                        f"function '{desc.function_name}' already claimed by '{owner.name}'",
                    )
                self._by_function[desc.function_name] = desc
                continue

            assert desc.method_name is not None
            for object_name in desc.object_names:
                key = (desc.method_name, object_name)
                owner = self._by_member.get(key)
                if owner is not None:
                    raise RegistryError(
                        desc.name,
                        f"'{object_name}.{desc.method_name}' already claimed by '{owner.name}'",
                    )
                self._by_member[key] = desc

    def by_function(self, function_name: str) -> Optional[ProviderDescriptor]:
        """Look up a function-call provider by its bare identifier."""
        return self._by_function.get(function_name)

    def by_member(self, method_name: str, object_name: str) -> Optional[ProviderDescriptor]:
        """Look up a member-call provider by (method, object) names."""
        return self._by_member.get((method_name, object_name))

    def get(self, name: str) -> Optional[ProviderDescriptor]:
        for desc in self._descriptors:
            if desc.name == name:
                return desc
        return None

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


_DEFAULT_REGISTRY: Optional[ProviderRegistry] = None


def default_registry() -> ProviderRegistry:
    """Return the registry built from the built-in PROVIDERS table."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = ProviderRegistry(PROVIDERS)
    return _DEFAULT_REGISTRY
