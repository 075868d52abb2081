from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Disk-backed response cache middleware.

Entries live in `<cache_dir>/<sha256-of-prompt>.json` and expire after a
configurable TTL. Every disk operation is best-effort: when the filesystem
misbehaves the middleware degrades to a transparent pass-through. Commands in
the skip list (e.g. "tip", whose prompt never changes but whose answer
should) always bypass the cache.
"""

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import BaseModel, ValidationError

from ..config import home_path
from ..middleware import ChatNext, StreamNext
from ..types import Request, TokenCallback
from ..utils import prompt_digest, utcnow

logger = logging.getLogger("ssage.pipeline.cache")

ENTRY_SUFFIX = ".json"


class CacheEntry(BaseModel):
    """On-disk representation of one cached response."""

    response: str
    created_at: datetime


def default_cache_dir() -> Path:
    return home_path(".ssage_cache")


class DiskCacheMiddleware:
    """
    SHA-256 keyed disk cache with a TTL and a command skip list.

    No locking: two processes racing on the same key both call the backend
    and the last write wins.
    """

    def __init__(
        self,
        ttl: timedelta | float,
        *skip_commands: str,
        directory: Path | str | None = None,
    ) -> None:
        self.ttl = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        self.skip_commands = frozenset(skip_commands)
        self.directory = Path(directory) if directory is not None else default_cache_dir()
        try:
            self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("cache directory %s unavailable: %s", self.directory, e)

    def wrap(self, call_next: ChatNext) -> ChatNext:
        def _handler(req: Request) -> str:
            if req.command in self.skip_commands:
                return call_next(req)

            key = prompt_digest(req.prompt)
            cached = self.load(key)
            if cached is not None:
                return cached

            response = call_next(req)
            self.store(key, response)
            return response

        return _handler

    def wrap_stream(self, call_next: StreamNext) -> StreamNext:
        def _handler(req: Request, on_token: TokenCallback) -> str:
            if req.command in self.skip_commands:
                return call_next(req, on_token)

            key = prompt_digest(req.prompt)
            cached = self.load(key)
            if cached is not None:
                # a hit is replayed as one chunk, not token by token
                on_token(cached)
                return cached

            response = call_next(req, on_token)
            self.store(key, response)
            return response

        return _handler

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{ENTRY_SUFFIX}"

    def load(self, key: str) -> str | None:
        """Return the cached response, or None on any miss (absent, bad, expired)."""
        path = self.path_for(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug("cache miss %s", key[:12])
            return None
        except OSError as e:
            logger.debug("cache read failed for %s: %s", key[:12], e)
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.debug("cache entry %s is malformed: %s", key[:12], e)
            return None

        created_at = entry.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if utcnow() - created_at > self.ttl:
            logger.debug("cache entry %s expired, evicting", key[:12])
            try:
                path.unlink()
            except OSError as e:
                logger.debug("cache eviction failed for %s: %s", key[:12], e)
            return None

        logger.debug("cache hit %s", key[:12])
        return entry.response

    def store(self, key: str, response: str) -> None:
        """Persist one entry; errors are logged and dropped."""
        tmp_name: str | None = None
        try:
            payload = CacheEntry(response=response, created_at=utcnow()).model_dump_json(indent=2)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key[:12]}-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path_for(key))
            tmp_name = None
        except (OSError, ValueError) as e:
            logger.debug("cache write failed for %s: %s", key[:12], e)
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
