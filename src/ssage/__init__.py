from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

ssage: a shell assistant built around a composable request pipeline.
"""

from .errors import (
    BackendError,
    ConfigurationError,
    DuplicateProviderError,
    SageError,
    UnknownProviderError,
)
from .middlewares import ContextEnhancer, DiskCacheMiddleware, RetryMiddleware
from .pipeline import Pipeline
from .providers import Provider, ProviderRegistry
from .types import Request

__all__ = [
    "Pipeline",
    "Request",
    "Provider",
    "ProviderRegistry",
    "ContextEnhancer",
    "DiskCacheMiddleware",
    "RetryMiddleware",
    "SageError",
    "BackendError",
    "ConfigurationError",
    "DuplicateProviderError",
    "UnknownProviderError",
]
