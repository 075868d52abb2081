from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Module defining middleware protocols for the request pipeline.
"""

from typing import Callable, Protocol

from .types import Request, TokenCallback


ChatNext = Callable[[Request], str]
StreamNext = Callable[[Request, TokenCallback], str]


class PipelineMiddleware(Protocol):
    """
    Cross-cutting behaviour around the one-shot and streaming handlers.

    A single instance is shared by every request made through a pipeline, so
    implementations must not keep per-request mutable state on `self`.
    """

    def wrap(self, call_next: ChatNext) -> ChatNext: ...

    def wrap_stream(self, call_next: StreamNext) -> StreamNext: ...
