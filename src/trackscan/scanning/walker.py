"""SourceWalker: finds tracking calls in every source file under a root.

Usage:
    walker = SourceWalker(CallSiteMatcher(signatures=sigs), config)
    result = walker.scan(Path("./web"))
    # result.call_sites is in file order, then source order

Per-file failures (unreadable, oversized, syntax errors, empty files, missing
grammar) are raised as AnalysisErrors and recorded as ScanWarnings; the file
is skipped and the scan continues.
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ..detection.constants import ConstantResolver, ScopeIndex
from ..detection.context import enclosing_function_name
from ..detection.matcher import CallSiteMatcher
from ..detection.nodes import line_of
from ..exceptions import AnalysisError, FileAccessError, ParsingError, UnsupportedLanguageError
from ..logging_config import get_logger
from ..models import CallSite, ScanWarning
from .files import DEFAULT_MAX_FILE_BYTES, discover_files, read_source, validate_root_directory
from .languages import LANGUAGES, detect_language
from .modules import ModuleGraph
from .treesitter_parser import TreeSitterParser, first_error_line

if TYPE_CHECKING:
    from ..config import ScanConfig

logger = get_logger(__name__)

# Default worker count: use CPU count, capped at 8 to avoid overwhelming I/O
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)


@dataclass
class FileResult:
    """Findings for one file."""

    path: str
    call_sites: list[CallSite] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)


@dataclass
class ScanResult:
    """Findings for a whole tree, merged in file order."""

    call_sites: list[CallSite] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    files_scanned: int = 0


class SourceWalker:
    """Walks a source tree and runs the matcher over every call expression.

    Attributes:
        matcher: Shared, stateless call-site matcher
        max_workers: Thread pool size for per-file work
    """

    def __init__(self, matcher: CallSiteMatcher, config: Optional[ScanConfig] = None) -> None:
        self.matcher = matcher
        self._config = config
        workers = config.workers if config is not None else None
        self.max_workers = workers or _DEFAULT_WORKERS
        self._max_bytes = config.max_file_size_bytes if config is not None else DEFAULT_MAX_FILE_BYTES
        # tree-sitter parsers are not thread-safe: one per worker thread
        self._local = threading.local()

    def scan(self, root: Union[str, Path]) -> ScanResult:
        """Scan every supported file under ``root``.

        Raises:
            InvalidPathError: If ``root`` is not a readable directory
        """
        root_dir = validate_root_directory(Path(root))
        ignore = self._config.ignore if self._config is not None else ()
        follow = self._config.follow_symlinks if self._config is not None else False

        files = discover_files(root_dir, ignore=ignore, follow_symlinks=follow)
        logger.debug(f"Discovered {len(files)} source files under {root_dir}")
        modules = ModuleGraph(root_dir, self._max_bytes)

        if len(files) < 2 or self.max_workers == 1:
            file_results = [self._scan_file(fp, root_dir, modules) for fp in files]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._scan_file, fp, root_dir, modules) for fp in files]
                # Collect in submission order so output is deterministic
                file_results = [future.result() for future in futures]

        result = ScanResult(files_scanned=len(files))
        for file_result in file_results:
            result.call_sites.extend(file_result.call_sites)
            result.warnings.extend(file_result.warnings)
        return result

    def analyze_source(
        self,
        code: Union[str, bytes],
        rel_path: str,
        language: Optional[str] = None,
        file_path: Optional[Path] = None,
        modules: Optional[ModuleGraph] = None,
    ) -> FileResult:
        """Find tracking calls in one in-memory source text.

        Args:
            code: Source text
            rel_path: Path recorded on call sites and warnings
            language: "javascript", "typescript" or "tsx"; detected from
                ``rel_path`` when omitted
            file_path: On-disk location, used to resolve relative imports
            modules: Module graph of the running scan; imports stay
                unresolved without one
        """
        result = FileResult(path=rel_path)
        try:
            result.call_sites = self._find_call_sites(code, rel_path, language, file_path, modules)
        except AnalysisError as e:
            self._warn(result, e.reason)
        return result

    # ── Internals ──────────────────────────────────────────────

    def _find_call_sites(
        self,
        code: Union[str, bytes],
        rel_path: str,
        language: Optional[str],
        file_path: Optional[Path],
        modules: Optional[ModuleGraph],
    ) -> list[CallSite]:
        """Parse and match one file.

        Raises:
            UnsupportedLanguageError: No language or grammar for the file
            ParsingError: Empty source, parser failure or syntax errors
        """
        data = code.encode("utf-8") if isinstance(code, str) else code
        lang = language or detect_language(rel_path)
        config = LANGUAGES.get(lang)
        if config is None:
            raise UnsupportedLanguageError(lang, list(LANGUAGES))

        if not data.strip():
            raise ParsingError(Path(rel_path), lang, "empty file")

        parser = self._parser()
        if not parser.is_language_supported(config.grammar):
            raise UnsupportedLanguageError(
                lang,
                parser.supported_languages(),
                reason=f"no tree-sitter grammar installed for {config.grammar}",
            )

        tree = parser.parse(data, config.grammar)
        if tree is None:
            raise ParsingError(Path(rel_path), lang, f"failed to parse as {config.grammar}")

        root = tree.root_node
        if root.has_error:
            line = first_error_line(root)
            where = f" near line {line}" if line is not None else ""
            raise ParsingError(Path(rel_path), lang, f"syntax error{where}")

        scope = ScopeIndex(root=root, path=file_path, modules=modules)
        resolver = ConstantResolver(scope)
        call_sites = []
        for node in _call_expressions(root):
            match = self.matcher.match(node, resolver)
            if match is None:
                continue
            call_sites.append(
                CallSite(
                    event_name=match.event_name,
                    source=match.source,
                    properties=match.properties,
                    path=rel_path,
                    line=line_of(node),
                    function=enclosing_function_name(node),
                )
            )
        return call_sites

    def _scan_file(self, file_path: Path, root_dir: Path, modules: ModuleGraph) -> FileResult:
        rel_path = file_path.relative_to(root_dir).as_posix()
        try:
            data = read_source(file_path, self._max_bytes)
        except FileAccessError as e:
            result = FileResult(path=rel_path)
            self._warn(result, e.reason)
            return result

        if data is None:
            logger.debug(f"Skipping binary file {rel_path}")
            return FileResult(path=rel_path)

        logger.debug(f"Scanning {rel_path}")
        try:
            return self.analyze_source(data, rel_path, file_path=file_path, modules=modules)
        except Exception as e:
            # One unexpected failure must not abort the whole scan
            logger.debug(f"Unexpected error in {rel_path}", exc_info=True)
            result = FileResult(path=rel_path)
            self._warn(result, f"analysis failed: {type(e).__name__}: {e}")
            return result

    def _parser(self) -> TreeSitterParser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = TreeSitterParser()
            self._local.parser = parser
        return parser

    @staticmethod
    def _warn(result: FileResult, message: str) -> None:
        logger.warning(f"{result.path}: {message}")
        result.warnings.append(ScanWarning(path=result.path, message=message))


def _call_expressions(root):
    """Pre-order traversal yielding call expressions in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            yield node
        stack.extend(reversed(node.children))
