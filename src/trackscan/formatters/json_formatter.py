"""JSON formatter."""

import json

from ..models import EventsMap, RepoDetails
from .base import BaseFormatter, build_document


class JsonFormatter(BaseFormatter):
    """Render the events map as JSON."""

    extension = ".json"

    def format(self, events: EventsMap, repo: RepoDetails) -> str:
        return json.dumps(build_document(events, repo), indent=2, ensure_ascii=False) + "\n"
