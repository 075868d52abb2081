from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Middleware that prepends an operating-environment block to every prompt:

    [System context: OS=linux, Arch=amd64, Shell=/bin/zsh]
"""

import os
import platform
from dataclasses import replace

from ..middleware import ChatNext, StreamNext
from ..types import Request, TokenCallback

UNKNOWN_SHELL = "unknown"

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def system_context() -> str:
    os_name = platform.system().lower() or "unknown"
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine or "unknown")
    shell = os.getenv("SHELL") or UNKNOWN_SHELL
    return f"[System context: OS={os_name}, Arch={arch}, Shell={shell}]\n"


class ContextEnhancer:
    """Stateless; rewrites `prompt` and leaves `command` untouched."""

    def wrap(self, call_next: ChatNext) -> ChatNext:
        def _handler(req: Request) -> str:
            return call_next(self._enhance(req))

        return _handler

    def wrap_stream(self, call_next: StreamNext) -> StreamNext:
        def _handler(req: Request, on_token: TokenCallback) -> str:
            return call_next(self._enhance(req), on_token)

        return _handler

    @staticmethod
    def _enhance(req: Request) -> Request:
        return replace(req, prompt=system_context() + req.prompt)
