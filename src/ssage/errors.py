from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines custom exceptions for error handling in ssage.
"""


class SageError(Exception):
    """Base exception for all ssage errors."""

    pass


class ProviderRegistryError(SageError):
    """Raised when provider registration/resolution fails."""

    pass


class DuplicateProviderError(ProviderRegistryError):
    """
    Two backends were registered under the same name.

    This is a programming mistake in the bootstrap path, not a runtime
    condition, so callers are not expected to handle it.
    """

    pass


class UnknownProviderError(ProviderRegistryError):
    """The resolved provider name has no registered factory."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "none"
        super().__init__(
            f"Unknown provider '{name}'. Available: {listing}"
        )


class ConfigurationError(SageError):
    pass


class BackendError(SageError):
    """
    The text-generation backend failed.

    Retry treats every backend error as transient; the last one is surfaced
    once attempts are exhausted.
    """

    pass


class BackendConnectionError(BackendError):
    pass


class ModelNotFoundError(BackendError):
    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(
            f"model '{model}' not found. Please run 'ollama pull {model}' to download it"
        )


class BackendResponseError(BackendError):
    """
    The backend answered with a non-success status or a body we couldn't
    decode.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)
