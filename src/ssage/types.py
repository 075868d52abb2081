from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the request type carried through the pipeline.
"""

from dataclasses import dataclass
from typing import Callable, TypeAlias

TokenCallback: TypeAlias = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class Request:
    """
    Canonical request type used by middleware and the pipeline.

    `command` is an opaque label (e.g. "explain", "tip") used only for
    policy decisions such as cache bypass. Middlewares that rewrite the
    prompt pass a `dataclasses.replace` copy downstream.
    """

    prompt: str
    command: str = ""
