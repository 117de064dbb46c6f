"""
Source file discovery and size-limited reads.

Discovery is deterministic: directories are walked in sorted order so that
the same tree always yields the same file list.
"""

import os
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Sequence

from ..exceptions import FileAccessError, InvalidPathError
from ..logging_config import get_logger
from .languages import SKIP_DIRS, supported_extensions

logger = get_logger(__name__)

# Bytes inspected when sniffing for binary content
BINARY_SNIFF_BYTES = 8192

DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024


def validate_root_directory(path: Path) -> Path:
    """
    Validate that a root directory can be scanned.

    Args:
        path: Directory path to validate

    Returns:
        Resolved absolute path

    Raises:
        InvalidPathError: If path is missing, not a directory or unreadable
    """
    try:
        resolved = Path(path).resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(path, f"Cannot resolve path: {e}")

    if not resolved.exists():
        raise InvalidPathError(resolved, "Directory does not exist")
    if not resolved.is_dir():
        raise InvalidPathError(resolved, "Path is not a directory")
    if not os.access(resolved, os.R_OK):
        raise InvalidPathError(resolved, "Directory is not readable")

    return resolved


def is_ignored(rel_path: str, patterns: Sequence[str], is_dir: bool = False) -> bool:
    """Check a POSIX relative path against ignore globs.

    A pattern matches the whole relative path, its trailing components
    (``PurePosixPath.match``) or the basename. A directory also matches
    ``dir/**`` style patterns so that it is pruned before descent.
    """
    if not patterns:
        return False
    name = rel_path.rsplit("/", 1)[-1]
    pure = PurePosixPath(rel_path)
    for pattern in patterns:
        if fnmatch(rel_path, pattern) or fnmatch(name, pattern):
            return True
        try:
            if pure.match(pattern):
                return True
        except ValueError:
            # Empty pattern
            continue
        if is_dir:
            prefix = pattern.rstrip("/*")
            if prefix and (fnmatch(rel_path, prefix) or fnmatch(name, prefix)):
                return True
    return False


def discover_files(
    root: Path,
    ignore: Iterable[str] = (),
    follow_symlinks: bool = False,
) -> list[Path]:
    """
    Find scannable source files under ``root``.

    Skips hidden entries, SKIP_DIRS, ignored paths and files whose extension
    has no language.

    Args:
        root: Resolved scan root
        ignore: Glob patterns matched against root-relative POSIX paths
        follow_symlinks: Whether to descend into symlinked directories

    Returns:
        Absolute paths in stable sorted order
    """
    patterns = tuple(ignore)
    extensions = supported_extensions()
    found: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_symlinks):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir

        kept = []
        for dirname in sorted(dirnames):
            if dirname.startswith(".") or dirname in SKIP_DIRS:
                continue
            rel = f"{rel_dir}/{dirname}" if rel_dir else dirname
            if is_ignored(rel, patterns, is_dir=True):
                logger.debug(f"Ignoring directory {rel}")
                continue
            kept.append(dirname)
        # os.walk honours in-place pruning
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            path = current / filename
            if path.suffix.lower() not in extensions:
                continue
            if path.is_symlink() and not follow_symlinks:
                continue
            rel = f"{rel_dir}/{filename}" if rel_dir else filename
            if is_ignored(rel, patterns):
                logger.debug(f"Ignoring file {rel}")
                continue
            found.append(path)

    return found


def read_source(path: Path, max_bytes: int) -> Optional[bytes]:
    """
    Read a source file with a size limit.

    Returns:
        File bytes, or None for binary content

    Raises:
        FileAccessError: If the file is unreadable or larger than ``max_bytes``
    """
    try:
        size = path.stat().st_size
    except OSError as e:
        raise FileAccessError(path, f"Cannot stat file: {e}")

    if size > max_bytes:
        size_mb = size / (1024 * 1024)
        limit_mb = max_bytes / (1024 * 1024)
        raise FileAccessError(path, f"File size ({size_mb:.2f}MB) exceeds limit ({limit_mb:.2f}MB)")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileAccessError(path, f"OS error: {e}")

    if b"\0" in data[:BINARY_SNIFF_BYTES]:
        return None
    return data
