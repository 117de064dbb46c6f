"""Custom tracking function signatures.

A signature names a non-standard tracking function and says which positional
argument carries the event name and which carries the properties object.
Signatures come either as structured data::

    {"function_name": "CustomModule.track",
     "parameters": [{"name": "userId"},
                    {"name": "eventName", "is_event_name": True},
                    {"name": "props", "is_properties": True}]}

or in compact form, ``"CustomModule.track(userId, EVENT_NAME, PROPERTIES)"``.
A bare name (``"trackEvent"``) means ``(EVENT_NAME, PROPERTIES)``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from ..exceptions import InvalidSignatureError

_COMPACT_RE = re.compile(r"^\s*([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*(?:\(([^)]*)\))?\s*$")
_NAME_PART_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

EVENT_NAME_TOKEN = "EVENT_NAME"
PROPERTIES_TOKEN = "PROPERTIES"


@dataclass(frozen=True)
class SignatureParameter:
    name: str
    is_event_name: bool = False
    is_properties: bool = False


@dataclass(frozen=True)
class CustomFunctionSignature:
    """A validated custom tracking function signature.

    Attributes:
        function_name: Bare or dotted name, e.g. "CustomModule.track"
        parameters: Ordered parameters; exactly one flagged is_event_name
    """

    function_name: str
    parameters: tuple[SignatureParameter, ...]

    def __post_init__(self) -> None:
        parts = self.function_name.split(".")
        if not all(_NAME_PART_RE.match(p) for p in parts):
            raise InvalidSignatureError(self.function_name, "function name is not a dotted identifier")
        event_flags = sum(1 for p in self.parameters if p.is_event_name)
        if event_flags == 0:
            raise InvalidSignatureError(self.function_name, "no parameter is flagged as the event name")
        if event_flags > 1:
            raise InvalidSignatureError(
                self.function_name, "more than one parameter is flagged as the event name"
            )
        if sum(1 for p in self.parameters if p.is_properties) > 1:
            raise InvalidSignatureError(
                self.function_name, "more than one parameter is flagged as the properties"
            )
        if any(p.is_event_name and p.is_properties for p in self.parameters):
            raise InvalidSignatureError(
                self.function_name, "a parameter cannot be both event name and properties"
            )

    @property
    def name_parts(self) -> tuple[str, ...]:
        return tuple(self.function_name.split("."))

    @property
    def event_index(self) -> int:
        return next(i for i, p in enumerate(self.parameters) if p.is_event_name)

    @property
    def properties_index(self) -> Optional[int]:
        for i, p in enumerate(self.parameters):
            if p.is_properties:
                return i
        return None

    @property
    def extra_parameters(self) -> list[tuple[int, str]]:
        """(index, name) of parameters that are neither event name nor properties."""
        return [
            (i, p.name)
            for i, p in enumerate(self.parameters)
            if not (p.is_event_name or p.is_properties)
        ]

    def __str__(self) -> str:
        params = []
        for p in self.parameters:
            if p.is_event_name:
                params.append(EVENT_NAME_TOKEN)
            elif p.is_properties:
                params.append(PROPERTIES_TOKEN)
            else:
                params.append(p.name)
        return f"{self.function_name}({', '.join(params)})"


SignatureInput = Union[str, Mapping[str, Any], CustomFunctionSignature]


def parse_signature(signature: str) -> CustomFunctionSignature:
    """Parse the compact ``name(arg, EVENT_NAME, PROPERTIES)`` form.

    Raises:
        InvalidSignatureError: If the text is not a valid signature
    """
    match = _COMPACT_RE.match(signature) if isinstance(signature, str) else None
    if match is None:
        raise InvalidSignatureError(signature, "expected 'name' or 'name(arg, EVENT_NAME, ...)'")

    function_name, params_part = match.group(1), match.group(2)
    if params_part is None:
        return CustomFunctionSignature(
            function_name=function_name,
            parameters=(
                SignatureParameter("eventName", is_event_name=True),
                SignatureParameter("properties", is_properties=True),
            ),
        )

    names = [p.strip() for p in params_part.split(",") if p.strip()]
    parameters = tuple(
        SignatureParameter(
            name=name,
            is_event_name=name.upper() == EVENT_NAME_TOKEN,
            is_properties=name.upper() == PROPERTIES_TOKEN,
        )
        for name in names
    )
    return CustomFunctionSignature(function_name=function_name, parameters=parameters)


def signature_from_mapping(data: Mapping[str, Any]) -> CustomFunctionSignature:
    """Build a signature from structured data (TOML table, JSON object).

    Both snake_case (``function_name``, ``is_event_name``) and camelCase
    (``functionName``, ``isEventName``) keys are accepted.
    """
    function_name = data.get("function_name", data.get("functionName"))
    if not isinstance(function_name, str) or not function_name:
        raise InvalidSignatureError(dict(data), "missing function_name")

    raw_params = data.get("parameters")
    if raw_params is None:
        return parse_signature(function_name)
    if not isinstance(raw_params, (list, tuple)):
        raise InvalidSignatureError(function_name, "parameters must be a list")

    parameters = []
    for raw in raw_params:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            raise InvalidSignatureError(function_name, f"invalid parameter entry: {raw!r}")
        parameters.append(
            SignatureParameter(
                name=raw["name"],
                is_event_name=bool(raw.get("is_event_name", raw.get("isEventName", False))),
                is_properties=bool(raw.get("is_properties", raw.get("isProperties", False))),
            )
        )
    return CustomFunctionSignature(function_name=function_name, parameters=tuple(parameters))


def load_signatures(
    signatures: Optional[Iterable[SignatureInput]],
) -> tuple[CustomFunctionSignature, ...]:
    """Normalize a mixed list of signature inputs.

    Validation happens here, before any scan starts.
    """
    if not signatures:
        return ()

    result = []
    for item in signatures:
        if isinstance(item, CustomFunctionSignature):
            result.append(item)
        elif isinstance(item, str):
            result.append(parse_signature(item))
        elif isinstance(item, Mapping):
            result.append(signature_from_mapping(item))
        else:
            raise InvalidSignatureError(item, "expected a string or a mapping")
    return tuple(result)
