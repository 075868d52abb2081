from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Composable middleware chain around a single provider.

    pipe = Pipeline(
        provider,
        ContextEnhancer(),
        DiskCacheMiddleware(timedelta(hours=24), "tip"),
        RetryMiddleware(3),
    )
    text = pipe.run_stream(prompt, "explain", print_token)
"""

from typing import Sequence

from .middleware import ChatNext, PipelineMiddleware, StreamNext
from .providers.contracts import Provider
from .types import Request, TokenCallback


class Pipeline:
    """
    Chains a provider with an ordered list of middlewares.

    `middlewares[0]` is the outermost layer: it sees the request first and
    the response (or error) last.
    """

    def __init__(self, provider: Provider, *middlewares: PipelineMiddleware) -> None:
        self.provider = provider
        self.middlewares: Sequence[PipelineMiddleware] = tuple(middlewares)

        def _base_handler(req: Request) -> str:
            return provider.generate(req.prompt)

        def _base_stream_handler(req: Request, on_token: TokenCallback) -> str:
            return provider.generate_stream(req.prompt, on_token)

        call_next: ChatNext = _base_handler
        stream_next: StreamNext = _base_stream_handler
        for middleware in reversed(self.middlewares):
            call_next = middleware.wrap(call_next)
            stream_next = middleware.wrap_stream(stream_next)

        self._handler = call_next
        self._stream_handler = stream_next

    def run(self, prompt: str, command: str) -> str:
        """Execute the chain for a one-shot request and return the full response."""
        return self._handler(Request(prompt=prompt, command=command))

    def run_stream(self, prompt: str, command: str, on_token: TokenCallback) -> str:
        """
        Execute the chain for a streaming request.

        `on_token` is called once per chunk; the return value is the full
        accumulated response.
        """
        return self._stream_handler(Request(prompt=prompt, command=command), on_token)
