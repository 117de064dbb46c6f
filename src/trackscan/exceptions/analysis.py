"""Analysis-related exceptions: file access, parsing, language support."""

from pathlib import Path
from typing import List, Optional

from .base import TrackscanError


class AnalysisError(TrackscanError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when file content cannot be parsed."""

    def __init__(self, filepath: Path, language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            details={"filepath": str(filepath), "language": language, "reason": reason},
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when no grammar is available for a file's language."""

    def __init__(self, language: str, supported_languages: List[str], reason: Optional[str] = None):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages
        self.reason = reason or f"unsupported language '{language}'"
