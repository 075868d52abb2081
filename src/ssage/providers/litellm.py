from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

LiteLLM-backed provider, for any model string litellm can route.
"""

from typing import Any, Iterator

from ..config import SageSettings
from ..errors import BackendError, ConfigurationError
from ..types import TokenCallback
from .ollama import resolve_model
from .registry import ProviderRegistry

PROVIDER_NAME = "litellm"


class LiteLLMProvider:
    """Concrete backend using the synchronous `litellm.completion` API."""

    def __init__(
        self,
        model: str,
        *,
        api_base: str | None = None,
        timeout_s: float = 120.0,
    ) -> None:
        self.model = model
        self.api_base = api_base
        self.timeout_s = timeout_s

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    def generate(self, prompt: str) -> str:
        response = self._completion(prompt, stream=False)
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError) as e:
            raise BackendError(f"litellm returned an unexpected response shape: {e}") from e
        return content or ""

    def generate_stream(self, prompt: str, on_token: TokenCallback) -> str:
        stream = self._completion(prompt, stream=True)
        parts: list[str] = []
        for chunk in _iter_chunks(stream):
            token = _delta_text(chunk)
            if token:
                on_token(token)
                parts.append(token)
        return "".join(parts)

    def _completion(self, prompt: str, *, stream: bool) -> Any:
        """Dispatch one prompt to `litellm.completion`."""
        try:
            from litellm import completion
        except ImportError as e:  # pragma: no cover - environment dependent
            raise ConfigurationError(
                "litellm is not installed. Install the dependency to use the litellm provider."
            ) from e

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": stream,
            "timeout": self.timeout_s,
        }
        if self.api_base:
            kwargs["api_base"] = self.api_base
        try:
            return completion(**kwargs)
        except Exception as e:
            raise BackendError(f"litellm request failed: {e}") from e


def _iter_chunks(stream: Any) -> Iterator[Any]:
    iterator = iter(stream)
    while True:
        try:
            chunk = next(iterator)
        except StopIteration:
            return
        except Exception as e:
            raise BackendError(f"error reading litellm stream: {e}") from e
        yield chunk


def _delta_text(chunk: Any) -> str:
    try:
        delta = chunk.choices[0].delta
    except (AttributeError, IndexError, KeyError):
        return ""
    text = getattr(delta, "content", None)
    return text if isinstance(text, str) else ""


def register(registry: ProviderRegistry, settings: SageSettings) -> None:
    """Register the `litellm` backend."""

    def _factory(model: str) -> LiteLLMProvider:
        resolved = resolve_model(model)
        # ollama/* models are served by the same local daemon as the ollama backend
        api_base = settings.ollama_url if resolved.startswith("ollama") else None
        return LiteLLMProvider(resolved, api_base=api_base, timeout_s=settings.timeout_s)

    registry.register(PROVIDER_NAME, _factory)
