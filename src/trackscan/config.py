"""Configuration loading and management for trackscan.

Configuration sources are merged in priority order:
    1. Defaults (defined in ScanConfig)
    2. Project config (./trackscan.toml)
    3. Explicit config file
    4. Environment variables (TRACKSCAN_* prefix)
    5. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, ignore=["**/*.test.js"])
    >>> config.verbosity
    'verbose'

A project file looks like::

    ignore = ["dist/**", "**/*.stories.tsx"]
    workers = 4
    custom_functions = [
        "trackEvent",
        "CustomModule.track(userId, EVENT_NAME, PROPERTIES)",
    ]
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .detection.signatures import CustomFunctionSignature, SignatureInput, load_signatures
from .exceptions import ConfigurationError, InvalidConfigError
from .formatters import FORMATTERS

# Type aliases for clarity
Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["yaml", "json"]

PROJECT_CONFIG_NAME = "trackscan.toml"
ENV_PREFIX = "TRACKSCAN_"


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for one scan.

    Attributes:
        File filtering:
            ignore: Glob patterns excluded from discovery (relative POSIX paths)
            max_file_size_mb: Files larger than this are skipped with a warning
            follow_symlinks: Descend into symlinked directories

        Detection:
            custom_functions: Custom tracking function signatures, as compact
                strings or mappings

        Performance tuning:
            workers: Number of parallel workers (None = auto-detect)

        Output control:
            output: Output file path (None = default name in the working directory)
            format: "yaml" or "json"
            verbosity: Logging verbosity level (drives setup_logging)
            log_file: Optional file that logs are appended to
    """

    # File filtering
    ignore: list[str] = field(default_factory=list)
    max_file_size_mb: float = 10.0
    follow_symlinks: bool = False

    # Detection
    custom_functions: list[SignatureInput] = field(default_factory=list)

    # Performance tuning
    workers: Optional[int] = None  # None = auto-detect from CPU cores

    # Output control
    output: Optional[str] = None
    format: OutputFormat = "yaml"
    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if self.format not in FORMATTERS:
            raise InvalidConfigError(
                "format", self.format, f"choose from: {', '.join(sorted(FORMATTERS))}"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "must be 'quiet', 'normal' or 'verbose'"
            )
        if not all(isinstance(p, str) for p in self.ignore):
            raise InvalidConfigError("ignore", self.ignore, "must be a list of glob strings")

        # Raises InvalidSignatureError before any file is scanned
        load_signatures(self.custom_functions)

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def signatures(self) -> tuple[CustomFunctionSignature, ...]:
        """Validated custom function signatures."""
        return load_signatures(self.custom_functions)

    @property
    def output_path(self) -> Path:
        """Where the document is written when no explicit path is set."""
        if self.output is not None:
            return Path(self.output)
        return Path(f"tracking-plan{FORMATTERS[self.format].extension}")


def load_config(config_file: Optional[Path] = None, **overrides) -> ScanConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored; ``verbose``/``quiet`` booleans map to
            ``verbosity``.

    Returns:
        Validated ScanConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid
        InvalidConfigError: If a value fails validation
    """
    # Start with empty dict - dataclass defaults will fill in
    merged: dict[str, Any] = {}

    # 1. Project config
    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    # 2. Explicit config file (highest priority from files)
    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    # 3. Environment variables (TRACKSCAN_* prefix)
    merged.update(_load_env_vars())

    # 4. CLI overrides (highest priority)
    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ScanConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from TRACKSCAN_* environment variables.

    Supported environment variables:
        TRACKSCAN_WORKERS: int
        TRACKSCAN_MAX_FILE_SIZE_MB: float
        TRACKSCAN_FOLLOW_SYMLINKS: bool (true/false/1/0)
        TRACKSCAN_OUTPUT: str
        TRACKSCAN_FORMAT: yaml/json
        TRACKSCAN_VERBOSITY: quiet/normal/verbose
        TRACKSCAN_LOG_FILE: str

    List fields (ignore, custom_functions) are not read from the environment.
    """
    type_hints = get_type_hints(ScanConfig)

    result: dict[str, Any] = {}

    for field_name in ScanConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Handle Optional[X] which is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Skip list types - too complex for env vars
    if origin is list or type_hint is list:
        return None

    # Bool: accept true/false/1/0/yes/no
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        # tomli for Python 3.9-3.10
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
