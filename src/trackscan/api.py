"""Public API for trackscan.

Example:
    >>> from trackscan import analyze_directory
    >>>
    >>> result = analyze_directory("./web")
    >>> list(result.events)
    ['Signed Up', 'Order Completed']
    >>>
    >>> # With custom tracking functions
    >>> result = analyze_directory(
    ...     "./web",
    ...     custom_functions=["CustomModule.track(userId, EVENT_NAME, PROPERTIES)"],
    ...     ignore=["**/*.test.js"],
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional, Union

from .config import ScanConfig, load_config
from .detection.matcher import CallSiteMatcher
from .detection.providers import ProviderRegistry
from .detection.signatures import SignatureInput
from .events import build_events_map
from .formatters import write_schema
from .git import get_repo_details
from .logging_config import get_logger
from .models import CallSite, EventsMap, RepoDetails, ScanWarning
from .scanning.walker import SourceWalker

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Outcome of scanning one directory."""

    events: EventsMap = field(default_factory=dict)
    call_sites: list[CallSite] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    files_scanned: int = 0


def analyze_directory(
    path: Union[str, Path] = ".",
    custom_functions: Optional[Iterable[SignatureInput]] = None,
    ignore: Optional[Iterable[str]] = None,
    workers: Optional[int] = None,
    registry: Optional[ProviderRegistry] = None,
    config: Optional[ScanConfig] = None,
) -> AnalysisResult:
    """Scan a directory and build its events map.

    Args:
        path: Root of the JavaScript/TypeScript tree
        custom_functions: Custom signatures (compact strings or mappings)
        ignore: Glob patterns to exclude
        workers: Thread pool size (None = auto-detect)
        registry: Provider registry; the built-in table by default
        config: Base configuration; explicit arguments override its fields

    Raises:
        InvalidSignatureError: If a custom signature is malformed
        InvalidPathError: If ``path`` is not a readable directory
    """
    if config is None:
        config = ScanConfig()
    changes = {}
    if custom_functions is not None:
        changes["custom_functions"] = list(custom_functions)
    if ignore is not None:
        changes["ignore"] = list(ignore)
    if workers is not None:
        changes["workers"] = workers
    if changes:
        config = replace(config, **changes)

    matcher = CallSiteMatcher(registry=registry, signatures=config.signatures)
    walker = SourceWalker(matcher, config)
    scan = walker.scan(path)

    events = build_events_map(scan.call_sites)
    logger.info(
        f"Found {len(events)} events in {len(scan.call_sites)} call sites "
        f"across {scan.files_scanned} files ({len(scan.warnings)} warnings)"
    )
    return AnalysisResult(
        events=events,
        call_sites=scan.call_sites,
        warnings=scan.warnings,
        files_scanned=scan.files_scanned,
    )


def run(
    path: Union[str, Path] = ".",
    config_file: Optional[Path] = None,
    config: Optional[ScanConfig] = None,
    stdout: bool = False,
    repository_url: Optional[str] = None,
    commit_hash: Optional[str] = None,
    commit_timestamp: Optional[str] = None,
    **overrides,
) -> tuple[AnalysisResult, str]:
    """Scan, serialize and write the events map.

    The document goes to ``output`` (or ``tracking-plan.<format>``); with
    ``stdout=True`` and no explicit output it is printed instead.

    Args:
        path: Root of the JavaScript/TypeScript tree
        config_file: Optional explicit config file path
        config: Already loaded configuration; ``config_file`` and
            ``overrides`` are ignored when given
        stdout: Print the document to stdout
        repository_url: Overrides ``git remote get-url origin``
        commit_hash: Overrides ``git rev-parse HEAD``
        commit_timestamp: Overrides the scan time
        **overrides: ScanConfig overrides (e.g. ignore=[...], format="json")

    Returns:
        Tuple of (AnalysisResult, serialized document)

    Raises:
        TrackscanError: On configuration errors or an unwritable output path
    """
    if config is None:
        config = load_config(config_file=config_file, **overrides)

    result = analyze_directory(path, config=config)
    repo: RepoDetails = get_repo_details(
        path,
        repository_url=repository_url,
        commit_hash=commit_hash,
        commit_timestamp=commit_timestamp,
    )

    output_path = config.output_path if config.output is not None or not stdout else None
    text = write_schema(result.events, repo, config.format, output_path=output_path, stdout=stdout)
    return result, text

