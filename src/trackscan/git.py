"""Repository metadata via git subprocess calls."""

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .logging_config import get_logger
from .models import RepoDetails

logger = get_logger(__name__)


def get_repo_details(
    target_dir: Union[str, Path],
    repository_url: Optional[str] = None,
    commit_hash: Optional[str] = None,
    commit_timestamp: Optional[str] = None,
) -> RepoDetails:
    """Collect repository URL, commit and timestamp for the output header.

    Explicit values win over what git reports. Outside a git checkout, or
    without git installed, the missing fields are None.
    """
    repo_path = str(Path(target_dir).resolve())

    if repository_url is None:
        repository_url = _git(repo_path, "remote", "get-url", "origin")
    if commit_hash is None:
        commit_hash = _git(repo_path, "rev-parse", "HEAD")
    if commit_timestamp is None:
        commit_timestamp = datetime.now(timezone.utc).isoformat()

    return RepoDetails(repository=repository_url, commit=commit_hash, timestamp=commit_timestamp)


def _git(repo_path: str, *args: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", "-C", repo_path, *args],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug(f"git {' '.join(args)} failed: {e}")
        return None

    if result.returncode != 0:
        logger.debug(f"git {' '.join(args)} exited {result.returncode}: {result.stderr.strip()}")
        return None
    return result.stdout.strip() or None
