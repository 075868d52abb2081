"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Module: middlewares/__init__.py.
"""

from .cache import CacheEntry, DiskCacheMiddleware
from .enhancer import ContextEnhancer
from .retry import RetryMiddleware

__all__ = [
    "CacheEntry",
    "ContextEnhancer",
    "DiskCacheMiddleware",
    "RetryMiddleware",
]
