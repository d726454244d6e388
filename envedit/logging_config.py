"""
envedit/logging_config.py
Logging setup for the envedit CLI.
JSON log format for machine-parseable output.
"""

from __future__ import annotations
import json
import logging
import os
import time


# ── Structured JSON Formatter ─────────────────────────────────────────────

class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter for machine-parseable logs.
    Fields: ts, level, logger, msg, extra, exception
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            entry["extra"] = record.extra_data

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ── Setup ─────────────────────────────────────────────────────────────────

def setup_logging(level: str = "WARNING", structured: bool = False,
                  log_dir: str = "") -> logging.Logger:
    """
    Configure the 'envedit' logger hierarchy.
    Args:
        level: log level (DEBUG/INFO/WARNING/ERROR)
        structured: if True, use JSON format; if False, use human-readable
        log_dir: directory for envedit.log (no file handler when empty)
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)

    root = logging.getLogger("envedit")
    root.setLevel(numeric)

    # Remove existing handlers
    for h in root.handlers[:]:
        root.removeHandler(h)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s][%(name)s][%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.setLevel(numeric)
    root.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, "envedit.log"),
                                           encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        file_handler.setLevel(numeric)
        root.addHandler(file_handler)

    return root
