"""Merge per-call-site findings into the events map.

Events are keyed by exact name and kept in first-seen order. For a property
seen at several call sites the first schema wins; later sites only fill in
what the first one lacks.
"""

from __future__ import annotations

import copy
from typing import Iterable

from .models import CallSite, DetectedEvent, EventsMap, Implementation, PropertySchema


def build_events_map(call_sites: Iterable[CallSite]) -> EventsMap:
    """Build the events map from call sites in scan order."""
    events: EventsMap = {}
    for site in call_sites:
        event = events.get(site.event_name)
        if event is None:
            event = DetectedEvent(name=site.event_name)
            events[site.event_name] = event

        event.implementations.append(
            Implementation(
                path=site.path,
                line=site.line,
                function=site.function,
                destination=site.source,
            )
        )
        merge_properties(event.properties, site.properties)
    return events


def merge_properties(target: dict[str, PropertySchema], incoming: dict[str, PropertySchema]) -> None:
    """Union ``incoming`` into ``target`` in place; existing schemas win."""
    for name, schema in incoming.items():
        existing = target.get(name)
        if existing is None:
            target[name] = copy.deepcopy(schema)
            continue

        if existing.type is None:
            existing.type = schema.type
        if existing.description is None:
            existing.description = schema.description
        if schema.properties:
            if existing.properties is None:
                if existing.type == schema.type:
                    existing.properties = copy.deepcopy(schema.properties)
            else:
                merge_properties(existing.properties, schema.properties)
        if existing.items is None and schema.items is not None and existing.type == schema.type:
            existing.items = copy.deepcopy(schema.items)
