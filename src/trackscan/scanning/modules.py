"""Cross-module constant lookup.

A ``ModuleGraph`` lives for one scan. When a scanned file uses a name it
imported from a relative path::

    // events.ts
    export const EVENTS = Object.freeze({ SIGNED_UP: 'Signed Up' });

    // signup.ts
    import { EVENTS } from './events';
    analytics.track(EVENTS.SIGNED_UP);

the graph parses ``events.ts`` (once per scan), finds the exported
declaration and hands it back to the resolver. Package imports, files
outside the scan root and modules that fail to parse stay unresolved.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..detection.constants import (
    MAX_ALIAS_DEPTH,
    Binding,
    ImportBinding,
    ScopeIndex,
    export_name,
)
from ..detection.nodes import Node, named_children, node_text, string_value
from ..exceptions import FileAccessError
from ..logging_config import get_logger
from .files import DEFAULT_MAX_FILE_BYTES, read_source
from .languages import COMPILED_SUFFIXES, LANGUAGES, MODULE_EXTENSIONS, detect_language
from .treesitter_parser import TreeSitterParser

logger = get_logger(__name__)


@dataclass
class ModuleInfo:
    """One parsed module and the names it exports."""

    path: Path
    tree: Any
    scope: ScopeIndex
    exports: dict[str, Binding] = field(default_factory=dict)
    star_sources: list[str] = field(default_factory=list)


class ModuleGraph:
    """Lazily parsed sibling modules, shared by all worker threads of a scan."""

    def __init__(self, root_dir: Path, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self.root_dir = Path(root_dir).resolve()
        self._max_bytes = max_bytes
        self._modules: dict[Path, Optional[ModuleInfo]] = {}
        self._scopes: dict[Node, ScopeIndex] = {}
        self._parser: Optional[TreeSitterParser] = None
        # Guards parsing and the caches above; tree-sitter parsers are not thread-safe
        self._lock = threading.Lock()

    def resolve_import(self, importer: Path, binding: ImportBinding) -> Optional[Node]:
        return self._resolve(importer, binding, 0)

    def scope_for(self, root: Node) -> Optional[ScopeIndex]:
        return self._scopes.get(root)

    def resolve_specifier(self, importer: Path, specifier: str) -> Optional[Path]:
        """File a relative import specifier points at, or None.

        Tries the path as written, then with each source extension, then as
        a directory ``index`` file.
        """
        if specifier not in (".", "..") and not specifier.startswith(("./", "../")):
            return None

        base = Path(os.path.normpath(importer.parent / specifier))
        candidates = [base]
        candidates.extend(base.with_name(base.name + ext) for ext in MODULE_EXTENSIONS)
        candidates.extend(base / f"index{ext}" for ext in MODULE_EXTENSIONS)
        if base.suffix in COMPILED_SUFFIXES:
            stem = base.with_suffix("")
            candidates.extend(stem.with_name(stem.name + ext) for ext in MODULE_EXTENSIONS)

        for candidate in candidates:
            if detect_language(candidate) == "unknown" or not candidate.is_file():
                continue
            if self._within_root(candidate):
                return candidate
        return None

    def load(self, path: Path) -> Optional[ModuleInfo]:
        """Parse ``path`` once per scan; None when it cannot be used."""
        with self._lock:
            if path in self._modules:
                return self._modules[path]
            module = self._parse(path)
            self._modules[path] = module
            if module is not None:
                self._scopes[module.scope.root] = module.scope
            return module

    # ── Internals ──────────────────────────────────────────────

    def _resolve(self, importer: Path, binding: ImportBinding, depth: int) -> Optional[Node]:
        # Bounded so that import cycles terminate
        if depth > MAX_ALIAS_DEPTH or binding.name == "*":
            return None
        path = self.resolve_specifier(importer, binding.source)
        if path is None:
            return None
        module = self.load(path)
        if module is None:
            return None

        if binding.name in module.exports:
            target = module.exports[binding.name]
        elif binding.name != "default":
            # export * from './other' never re-exports a default
            for source in module.star_sources:
                found = self._resolve(path, ImportBinding(source, binding.name), depth + 1)
                if found is not None:
                    return found
            return None
        else:
            return None

        if isinstance(target, ImportBinding):
            return self._resolve(path, target, depth + 1)
        return target

    def _parse(self, path: Path) -> Optional[ModuleInfo]:
        try:
            data = read_source(path, self._max_bytes)
        except FileAccessError as e:
            logger.debug(f"Cannot load imported module {path}: {e.reason}")
            return None
        if data is None:
            return None

        config = LANGUAGES.get(detect_language(path))
        if config is None:
            return None
        if self._parser is None:
            self._parser = TreeSitterParser()
        tree = self._parser.parse(data, config.grammar)
        if tree is None or tree.root_node.has_error:
            logger.debug(f"Imported module {path} did not parse cleanly; its exports stay unresolved")
            return None

        logger.debug(f"Loaded imported module {path}")
        scope = ScopeIndex(root=tree.root_node, path=path, modules=self)
        module = ModuleInfo(path=path, tree=tree, scope=scope)
        _collect_exports(module)
        return module

    def _within_root(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self.root_dir)
        except (OSError, ValueError):
            return False
        return True


def _collect_exports(module: ModuleInfo) -> None:
    """Fill ``module.exports`` from the module's top-level export statements."""
    scope = module.scope
    for stmt in named_children(scope.root):
        if stmt.type != "export_statement":
            continue
        source = string_value(stmt.child_by_field_name("source"))
        decl = stmt.child_by_field_name("declaration")

        if any(child.type == "default" for child in stmt.children):
            value = stmt.child_by_field_name("value")
            if value is not None and value.type == "identifier":
                module.exports["default"] = scope.top_level_binding(node_text(value))
            elif value is not None:
                # _initializer reads the "value" field of the export statement
                module.exports["default"] = stmt
            else:
                module.exports["default"] = None
            continue

        if decl is not None:
            for name in _declared_names(decl):
                module.exports[name] = scope.top_level_binding(name)
            continue

        clause = next((c for c in named_children(stmt) if c.type == "export_clause"), None)
        if clause is not None:
            for spec in named_children(clause):
                if spec.type != "export_specifier":
                    continue
                local = export_name(spec.child_by_field_name("name"))
                alias = spec.child_by_field_name("alias")
                exported = export_name(alias) if alias is not None else local
                if local is None or exported is None:
                    continue
                if source is not None:
                    module.exports[exported] = ImportBinding(source, local)
                else:
                    module.exports[exported] = scope.top_level_binding(local)
        elif source is not None:
            namespace = next((c for c in named_children(stmt) if c.type == "namespace_export"), None)
            if namespace is None:
                module.star_sources.append(source)
            else:
                for ident in named_children(namespace):
                    name = export_name(ident)
                    if name is not None:
                        module.exports[name] = ImportBinding(source, "*")


def _declared_names(decl: Node) -> list[str]:
    if decl.type in ("lexical_declaration", "variable_declaration"):
        names = []
        for declarator in named_children(decl):
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                names.append(node_text(name_node))
        return names
    name_node = decl.child_by_field_name("name")
    return [node_text(name_node)] if name_node is not None else []
