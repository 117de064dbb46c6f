"""Base formatter interface for events-map output rendering."""

from abc import ABC, abstractmethod
from typing import Any

from ..models import EventsMap, RepoDetails

SCHEMA_VERSION = 1


def build_document(events: EventsMap, repo: RepoDetails) -> dict[str, Any]:
    """The plain-data document every formatter serializes."""
    return {
        "version": SCHEMA_VERSION,
        "source": repo.to_dict(),
        "events": {name: event.to_dict() for name, event in events.items()},
    }


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    #: Suffix of the default output file (tracking-plan.yaml)
    extension: str = ""

    @abstractmethod
    def format(self, events: EventsMap, repo: RepoDetails) -> str:
        """Return formatted string representation of the events map."""
