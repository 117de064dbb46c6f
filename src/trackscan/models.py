"""Data models for detected tracking events.

CallSite is the per-call-site finding produced by the walker. DetectedEvent
is the merged, per-event-name view that the formatters serialize.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class PropertySchema:
    """Schema of one event property.

    Attributes:
        type: Inferred type name (string, number, boolean, object, array, ...)
        description: Human text, filled by downstream tooling
        properties: Nested schemas when ``type == "object"``
        items: Element schema when ``type == "array"``
    """

    type: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[dict[str, PropertySchema]] = None
    items: Optional[PropertySchema] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.description is not None:
            data["description"] = self.description
        if self.type is not None:
            data["type"] = self.type
        if self.properties is not None:
            data["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.items is not None:
            data["items"] = self.items.to_dict()
        return data


@dataclass(frozen=True)
class CallSite:
    """A single tracking call found in a source file.

    Attributes:
        event_name: Resolved event name (never empty)
        source: Provider name, or "custom" for custom signatures
        properties: Property schemas extracted from the call
        path: File path relative to the scan root (POSIX separators)
        line: 1-based line of the call expression
        function: Enclosing function name, None at module level
    """

    event_name: str
    source: str
    properties: dict[str, PropertySchema]
    path: str
    line: int
    function: Optional[str] = None


@dataclass(frozen=True)
class Implementation:
    """Where an event is emitted."""

    path: str
    line: int
    function: Optional[str] = None
    destination: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "line": self.line}
        if self.function is not None:
            data["function"] = self.function
        if self.destination is not None:
            data["destination"] = self.destination
        return data


@dataclass
class DetectedEvent:
    """One distinct event name across the scanned tree."""

    name: str
    description: Optional[str] = None
    properties: dict[str, PropertySchema] = field(default_factory=dict)
    implementations: list[Implementation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.description is not None:
            data["description"] = self.description
        data["implementations"] = [impl.to_dict() for impl in self.implementations]
        data["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        return data


@dataclass(frozen=True)
class RepoDetails:
    """Snapshot of the scanned repository's metadata."""

    repository: Optional[str]
    commit: Optional[str]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository,
            "commit": self.commit,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ScanWarning:
    """A non-fatal, per-file problem recorded during a scan."""

    path: str
    message: str


# Event name -> merged event, in first-seen order
EventsMap = dict[str, DetectedEvent]
