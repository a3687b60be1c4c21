"""Structured error taxonomy for the tour engine."""

from __future__ import annotations
from typing import Any

__all__ = [
    "OnboardingError",
    "ValidationError",
    "StorageError",
    "SelectorResolutionError",
    "PlatformDetectionError",
    "ImportCancelledError",
    "ImportFileError",
    "PlayerStateError",
]


class OnboardingError(Exception):
    """Base class for tour engine issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ValidationError(OnboardingError):
    """Raised when an import bundle is structurally invalid (first violation only)."""


class StorageError(OnboardingError):
    """Raised by key/value backends when the persisted store fails."""


class SelectorResolutionError(OnboardingError):
    """Raised when a step's target element cannot be found at play time."""


class PlatformDetectionError(OnboardingError):
    """Raised when asynchronous platform detection fails or times out."""


class ImportCancelledError(OnboardingError):
    """Raised when the user dismisses the import file picker."""


class ImportFileError(OnboardingError):
    """Raised when a selected import file cannot be read."""


class PlayerStateError(OnboardingError):
    """Raised on lifecycle misuse of a one-shot tour player."""
