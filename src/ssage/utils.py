from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Utility functions shared by the pipeline middlewares.
"""
import hashlib
from datetime import datetime, timezone


def backoff_delay(attempt: int, base_s: float = 0.5) -> float:
    """
    Exponential backoff without jitter.
    attempt=0 => base, attempt=1 => 2*base, etc.
    """
    return base_s * (2 ** attempt)


def prompt_digest(prompt: str) -> str:
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
