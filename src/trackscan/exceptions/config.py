"""Configuration exceptions: paths, settings, signatures, provider registry."""

from pathlib import Path
from typing import Any

from .base import TrackscanError


class ConfigurationError(TrackscanError):
    """Base class for configuration-related errors."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidSignatureError(ConfigurationError):
    """Raised when a custom tracking function signature is malformed."""

    def __init__(self, signature: Any, reason: str):
        super().__init__(
            f"Invalid custom function signature: {signature}",
            details={"signature": str(signature), "reason": reason},
        )
        self.signature = signature
        self.reason = reason


class RegistryError(TrackscanError):
    """Raised when the provider registry is built from conflicting descriptors."""

    def __init__(self, provider: str, reason: str):
        super().__init__(
            f"Invalid provider registry entry: {provider}",
            details={"provider": provider, "reason": reason},
        )
        self.provider = provider
        self.reason = reason
