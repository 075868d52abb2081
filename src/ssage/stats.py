from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Local per-command usage statistics, stored as JSON next to the config.
"""

import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, RootModel, ValidationError

from .config import env_path
from .utils import utcnow

logger = logging.getLogger("ssage.stats")


class CommandStats(BaseModel):
    runs: int = 0
    failures: int = 0
    total_time_ms: int = 0
    avg_time_ms: int = 0
    last_run: datetime | None = None
    last_error: str | None = None


class StatsStore(RootModel[dict[str, CommandStats]]):
    root: dict[str, CommandStats] = Field(default_factory=dict)


def stats_path() -> Path:
    return env_path("SSAGE_METRICS_FILE", ".ssage_metrics.json")


def load_stats(path: Path | None = None) -> StatsStore:
    """Read the stats file; a missing or corrupt file yields an empty store."""
    source = path or stats_path()
    try:
        return StatsStore.model_validate_json(source.read_bytes())
    except FileNotFoundError:
        return StatsStore()
    except (OSError, ValidationError) as e:
        logger.debug("discarding unreadable stats file %s: %s", source, e)
        return StatsStore()


def record(
    command: str,
    elapsed_s: float,
    error: str | None = None,
    *,
    path: Path | None = None,
) -> CommandStats:
    """Update stats for one finished command run. Never raises on I/O failure."""
    target = path or stats_path()
    store = load_stats(target)
    stat = store.root.setdefault(command, CommandStats())
    stat.runs += 1
    stat.total_time_ms += int(elapsed_s * 1000)
    stat.avg_time_ms = stat.total_time_ms // stat.runs
    stat.last_run = utcnow()
    if error:
        stat.failures += 1
        stat.last_error = error

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(store.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")
    except OSError as e:
        logger.debug("could not write stats file %s: %s", target, e)
    return stat
