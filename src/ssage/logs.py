from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

JSON-lines file logging for the CLI. Library modules only create named
loggers; handlers are attached here, once, by the entrypoint.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

_HANDLER_NAME = "ssage-file"

_STD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys() | {"message", "asctime"}
)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields are carried through."""

    def format(self, record: logging.LogRecord) -> str:
        row: dict[str, object] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _STD_ATTRS and not key.startswith("_"):
                row[key] = value
        if record.exc_info:
            row["error"] = self.formatException(record.exc_info)
        return json.dumps(row, default=str, ensure_ascii=False)


def configure_logging(log_file: Path, level: str = "INFO") -> logging.Logger:
    """
    Attach the JSON file handler to the `ssage` logger.

    When the file can't be opened logging is silenced (NullHandler).
    """
    root = logging.getLogger("ssage")
    level_no = logging.getLevelName(level.upper())
    root.setLevel(level_no if isinstance(level_no, int) else logging.INFO)
    root.propagate = False

    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
            existing.close()

    handler: logging.Handler
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(JsonFormatter())
    except OSError:
        handler = logging.NullHandler()
    handler.set_name(_HANDLER_NAME)
    root.addHandler(handler)
    return root
