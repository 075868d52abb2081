from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Registry mapping backend names to provider factories.
"""

import logging
import os
from threading import Lock
from typing import Callable

from ..config import DEFAULT_PROVIDER, UserConfig, load_user_config
from ..errors import ConfigurationError, DuplicateProviderError, UnknownProviderError
from .contracts import Provider, ProviderFactory

logger = logging.getLogger("ssage.providers")

PROVIDER_ENV_VAR = "SSAGE_PROVIDER"


class ProviderRegistry:
    """
    Explicit name -> factory registry.

    Constructed once at program start (see `ssage.bootstrap`) and populated by
    each backend's `register(registry)` function before the first `create`.
    """

    def __init__(
        self,
        *,
        config_loader: Callable[[], UserConfig] = load_user_config,
    ) -> None:
        self._factories: dict[str, ProviderFactory] = {}
        self._lock = Lock()
        self._config_loader = config_loader

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a backend factory; a duplicate name is a programming error."""
        key = name.strip().lower()
        if not key:
            raise ValueError("Provider name must be non-empty")

        with self._lock:
            if key in self._factories:
                raise DuplicateProviderError(f"provider {key!r} already registered")
            self._factories[key] = factory

    def available(self) -> list[str]:
        """List registered provider names in deterministic order."""
        with self._lock:
            return sorted(self._factories)

    def resolve_name(self, override: str | None = None) -> str:
        """
        Apply the name priority chain: override > SSAGE_PROVIDER > config file
        > built-in default. Later sources are only consulted when earlier ones
        are empty.
        """
        if override and override.strip():
            return override.strip().lower()

        env = os.getenv(PROVIDER_ENV_VAR, "").strip()
        if env:
            return env.lower()

        try:
            configured = self._config_loader().provider.strip()
        except ConfigurationError as e:
            logger.debug("ignoring unreadable config during provider resolution: %s", e)
            configured = ""
        if configured:
            return configured.lower()

        return DEFAULT_PROVIDER

    def create(self, override: str | None = None, model: str = "") -> Provider:
        """Resolve a provider name and build it for `model`."""
        name = self.resolve_name(override)
        with self._lock:
            factory = self._factories.get(name)
        if factory is None:
            raise UnknownProviderError(name, self.available())

        logger.info("creating provider %s (model=%s)", name, model or "<default>")
        return factory(model)
