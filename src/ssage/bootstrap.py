from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Single bootstrap path: builds the provider registry and the standard pipeline.
"""

from .config import SageSettings
from .middlewares import ContextEnhancer, DiskCacheMiddleware, RetryMiddleware
from .middleware import PipelineMiddleware
from .pipeline import Pipeline
from .providers import litellm, ollama
from .providers.registry import ProviderRegistry

# Commands whose prompt is constant but whose answer is expected to vary.
CACHE_SKIP_COMMANDS = ("tip",)


def default_registry(settings: SageSettings | None = None) -> ProviderRegistry:
    """Create a registry with every built-in backend registered."""
    cfg = settings or SageSettings.from_env()
    registry = ProviderRegistry()
    ollama.register(registry, cfg)
    litellm.register(registry, cfg)
    return registry


def build_pipeline(
    registry: ProviderRegistry,
    *,
    settings: SageSettings | None = None,
    provider: str | None = None,
    model: str = "",
    use_cache: bool = True,
) -> Pipeline:
    """
    Wire the standard stack: enhancer -> cache -> retry -> provider.

    The cache keys on the enhanced prompt; retry wraps only the backend call.
    """
    cfg = settings or SageSettings.from_env()
    backend = registry.create(provider, model)

    middlewares: list[PipelineMiddleware] = [ContextEnhancer()]
    if use_cache:
        middlewares.append(
            DiskCacheMiddleware(cfg.cache_ttl_s, *CACHE_SKIP_COMMANDS, directory=cfg.cache_dir)
        )
    middlewares.append(RetryMiddleware(cfg.max_attempts))
    return Pipeline(backend, *middlewares)
