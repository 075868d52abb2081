from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

HTTP client for a local Ollama server (`POST /api/generate`).
"""

import http.client
import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any, Callable, Iterator

from ..config import DEFAULT_MODEL, DEFAULT_OLLAMA_URL, SageSettings, UserConfig, load_user_config
from ..errors import (
    BackendConnectionError,
    BackendResponseError,
    ConfigurationError,
    ModelNotFoundError,
)
from ..types import TokenCallback
from .registry import ProviderRegistry

logger = logging.getLogger("ssage.providers.ollama")

PROVIDER_NAME = "ollama"

# IncompleteRead and friends are HTTPException, not OSError
_READ_ERRORS = (OSError, http.client.HTTPException)


def resolve_model(
    explicit: str | None,
    *,
    config_loader: Callable[[], UserConfig] = load_user_config,
) -> str:
    """Model precedence: explicit > SSAGE_MODEL > config file > built-in default."""
    if explicit:
        return explicit
    env = os.getenv("SSAGE_MODEL", "").strip()
    if env:
        return env
    try:
        configured = config_loader().model.strip()
    except ConfigurationError:
        configured = ""
    return configured or DEFAULT_MODEL


class OllamaClient:
    """Blocking Ollama backend; streaming pushes each chunk from the read loop."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        *,
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout_s: float = 120.0,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    def generate(self, prompt: str) -> str:
        with self._post(prompt, stream=False) as resp:
            try:
                raw = resp.read()
            except _READ_ERRORS as e:
                raise BackendConnectionError(f"error reading response: {e}") from e

        try:
            body = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise BackendResponseError(f"failed to decode response: {e}") from e
        if not isinstance(body, dict):
            raise BackendResponseError("failed to decode response: expected a JSON object")
        text = body.get("response")
        return text if isinstance(text, str) else ""

    def generate_stream(self, prompt: str, on_token: TokenCallback) -> str:
        parts: list[str] = []
        with self._post(prompt, stream=True) as resp:
            for raw_line in _iter_lines(resp):
                line = raw_line.strip()
                if not line:
                    continue
                chunk = _decode_chunk(line)
                if chunk is None:
                    continue
                token = chunk.get("response")
                if isinstance(token, str) and token:
                    on_token(token)
                    parts.append(token)
                if chunk.get("done") is True:
                    break

        return "".join(parts)

    def _post(self, prompt: str, *, stream: bool):
        payload = json.dumps(
            {"model": self.model, "prompt": prompt, "stream": stream}
        ).encode("utf-8")
        req = urllib.request.Request(
            f"{self.base_url}/api/generate",
            data=payload,
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            return urllib.request.urlopen(req, timeout=self.timeout_s)  # noqa: S310
        except urllib.error.HTTPError as e:
            body = ""
            try:
                body = e.read().decode("utf-8", errors="replace")
            except _READ_ERRORS:
                body = ""
            if e.code == 404:
                raise ModelNotFoundError(self.model) from e
            raise BackendResponseError(
                f"ollama API returned status {e.code}: {body or e.reason}",
                status=e.code,
            ) from e
        except urllib.error.URLError as e:
            raise BackendConnectionError(
                f"failed to send request to Ollama: {e.reason}"
            ) from e
        except _READ_ERRORS as e:
            raise BackendConnectionError(f"failed to send request to Ollama: {e}") from e


def _iter_lines(resp) -> Iterator[bytes]:
    """Yield raw response lines; only the socket read is guarded."""
    while True:
        try:
            raw = resp.readline()
        except _READ_ERRORS as e:
            raise BackendConnectionError(f"error reading stream: {e}") from e
        if not raw:
            return
        yield raw


def _decode_chunk(line: bytes) -> dict[str, Any] | None:
    """Decode one NDJSON line; malformed lines are skipped."""
    try:
        obj = json.loads(line.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        logger.debug("skipping malformed stream line: %r", line[:200])
        return None
    return obj if isinstance(obj, dict) else None


def register(registry: ProviderRegistry, settings: SageSettings) -> None:
    """Register the `ollama` backend."""

    def _factory(model: str) -> OllamaClient:
        return OllamaClient(
            resolve_model(model),
            base_url=settings.ollama_url,
            timeout_s=settings.timeout_s,
        )

    registry.register(PROVIDER_NAME, _factory)
