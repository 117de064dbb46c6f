"""Exception hierarchy for trackscan."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ParsingError,
    UnsupportedLanguageError,
)
from .base import TrackscanError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
    InvalidSignatureError,
    RegistryError,
)

__all__ = [
    "TrackscanError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "InvalidSignatureError",
    "RegistryError",
]
