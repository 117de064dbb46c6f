"""YAML formatter."""

import yaml

from ..models import EventsMap, RepoDetails
from .base import BaseFormatter, build_document


class YamlFormatter(BaseFormatter):
    """Render the events map as YAML, keys in document order."""

    extension = ".yaml"

    def format(self, events: EventsMap, repo: RepoDetails) -> str:
        return yaml.safe_dump(
            build_document(events, repo),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
