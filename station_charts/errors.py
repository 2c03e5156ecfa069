"""Exceptions shared across the station chart packages."""

from __future__ import annotations

from typing import Optional


class ConfigurationError(ValueError):
    """Raised when chart or station configuration values are unusable."""


class DataCorruptionError(RuntimeError):
    """Raised when a persisted point cannot be decoded."""

    def __init__(self, message: str, key: Optional[str] = None, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key
        self.raw = raw


class StorageError(RuntimeError):
    """Raised when a key-value store cannot be read or written."""
