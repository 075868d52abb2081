from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Provider contracts for pluggable text-generation backends.
"""

from typing import Callable, Protocol

from ..types import TokenCallback


class Provider(Protocol):
    """Backend interface consumed by the pipeline."""

    @property
    def name(self) -> str:
        """Stable backend id (e.g. 'ollama')."""
        ...

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the full response."""
        ...

    def generate_stream(self, prompt: str, on_token: TokenCallback) -> str:
        """
        Send a prompt and call `on_token` once per chunk received.

        Returns the full accumulated response so callers can reuse it after
        consuming it incrementally (e.g. caching).
        """
        ...


ProviderFactory = Callable[[str], Provider]
