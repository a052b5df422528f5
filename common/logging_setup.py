from __future__ import annotations

import logging
import os
import sys
import json
import time
from typing import Any, Dict, Optional


# LogRecord attributes that are not user-supplied `extra=` fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      { "t": 1700000000000, "lvl": "INFO", "name": "engine.acquisition",
        "msg": "text", "state": "FetchingDescriptor", ... }

    Fields passed through `extra={...}` are merged at top level.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        for k, v in record.__dict__.items():
            if k not in _RESERVED and not k.startswith("_"):
                payload[k] = v
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger once with JSON formatting.
    Level precedence:
      - explicit `level` arg
      - env LOG_LEVEL (e.g., DEBUG/INFO/WARNING/ERROR)
      - default INFO
    `log_file` adds a second JSON handler appending to that path.
    """
    root = logging.getLogger()
    if getattr(root, "_geoanchor_configured", False):  # idempotent
        if level:
            root.setLevel(getattr(logging, level.upper(), logging.INFO))
        return

    lvl_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(JsonFormatter())
        root.addHandler(fh)
    root.setLevel(lvl)
    root._geoanchor_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensures root is configured."""
    setup_logging()
    return logging.getLogger(name)
