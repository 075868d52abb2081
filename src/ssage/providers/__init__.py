"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Module: providers/__init__.py.
"""

from .contracts import Provider, ProviderFactory
from .litellm import LiteLLMProvider
from .ollama import OllamaClient
from .registry import ProviderRegistry

__all__ = [
    "Provider",
    "ProviderFactory",
    "ProviderRegistry",
    "OllamaClient",
    "LiteLLMProvider",
]
