"""Source discovery, parsing and traversal."""

from .files import discover_files, is_ignored, read_source, validate_root_directory
from .languages import LANGUAGES, LanguageConfig, detect_language, supported_extensions
from .modules import ModuleGraph, ModuleInfo
from .treesitter_parser import TREE_SITTER_AVAILABLE, TreeSitterParser, get_supported_languages
from .walker import FileResult, ScanResult, SourceWalker

__all__ = [
    "FileResult",
    "LANGUAGES",
    "LanguageConfig",
    "ModuleGraph",
    "ModuleInfo",
    "ScanResult",
    "SourceWalker",
    "TREE_SITTER_AVAILABLE",
    "TreeSitterParser",
    "detect_language",
    "discover_files",
    "get_supported_languages",
    "is_ignored",
    "read_source",
    "supported_extensions",
    "validate_root_directory",
]
