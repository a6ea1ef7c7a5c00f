"""Log formatting for the server's stderr output.

The cache reports its counters (cleared_count, before_size, ...) through
``extra=``; the formatter appends those fields so they reach the log line.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ExtraFieldsFormatter(logging.Formatter):
    """Text formatter that appends ``extra`` fields as ``[key=value, ...]``."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        ]
        if extras:
            base += f" [{', '.join(extras)}]"
        return base


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Handler:
    # stdout carries the MCP stdio transport, so logs go to stderr by default
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter(DEFAULT_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])
    return handler
