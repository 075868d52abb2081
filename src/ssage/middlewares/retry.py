from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Retry middleware with exponential backoff (500 ms, 1 s, 2 s, ...).

One-shot requests are retried transparently. Streaming requests are only
retried while nothing has reached the caller yet: once a token has been
delivered, the caller has started rendering and a second attempt would
duplicate output, so the error is raised as-is.
"""

import logging
import time
from typing import Callable

from ..errors import SageError
from ..middleware import ChatNext, StreamNext
from ..types import Request, TokenCallback
from ..utils import backoff_delay

logger = logging.getLogger("ssage.pipeline.retry")

BACKOFF_BASE_S = 0.5


class RetryMiddleware:
    """
    Retries failed requests up to `max_attempts` times in total.

    `RetryMiddleware(3)` means one initial attempt followed by up to two
    retries. Values below 1 are clamped to 1 (no retry).
    """

    def __init__(
        self,
        max_attempts: int,
        *,
        backoff_base_s: float = BACKOFF_BASE_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_attempts = max(1, max_attempts)
        self.backoff_base_s = backoff_base_s
        self._sleep = sleep

    def wrap(self, call_next: ChatNext) -> ChatNext:
        def _handler(req: Request) -> str:
            last: Exception | None = None
            for attempt in range(self.max_attempts):
                if attempt > 0:
                    self._pause(attempt, req, last)
                try:
                    return call_next(req)
                except Exception as e:
                    if attempt + 1 >= self.max_attempts:
                        raise
                    last = e
            raise SageError(f"request failed after {self.max_attempts} attempts") from last

        return _handler

    def wrap_stream(self, call_next: StreamNext) -> StreamNext:
        def _handler(req: Request, on_token: TokenCallback) -> str:
            last: Exception | None = None
            for attempt in range(self.max_attempts):
                if attempt > 0:
                    self._pause(attempt, req, last)

                delivered = False

                def _guarded(token: str) -> None:
                    nonlocal delivered
                    delivered = True
                    on_token(token)

                try:
                    return call_next(req, _guarded)
                except Exception as e:
                    if delivered:
                        logger.warning(
                            "stream for %r failed after output started; not retrying: %s",
                            req.command,
                            e,
                        )
                        raise
                    if attempt + 1 >= self.max_attempts:
                        raise
                    last = e
            raise SageError(f"request failed after {self.max_attempts} attempts") from last

        return _handler

    def _pause(self, attempt: int, req: Request, error: Exception | None) -> None:
        delay = backoff_delay(attempt - 1, self.backoff_base_s)
        logger.warning(
            "attempt %d/%d for %r failed (%s); retrying in %.1fs",
            attempt,
            self.max_attempts,
            req.command,
            error,
            delay,
        )
        self._sleep(delay)
