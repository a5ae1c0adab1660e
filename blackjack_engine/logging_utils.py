"""Logging setup and JSONL event logs."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import IO, Any, Callable, Dict, Optional

from .constants import DEFAULT_LOG_LEVEL, LOG_FORMAT

# LOG_LEVEL=DEBUG / INFO / WARNING / ERROR
LOG_LEVEL = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def setup_logging(level: Optional[str] = None) -> None:
    """Call once at program start (the CLI does)."""
    name = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def jsonl_writer(fh: IO[str]) -> Callable[[Dict[str, Any]], None]:
    """Return a ``log_fn`` that appends each event as one timestamped JSON line."""

    def emit(event: Dict[str, Any]) -> None:
        record = dict(event)
        record["timestamp"] = datetime.now().isoformat()
        fh.write(json.dumps(record) + "\n")
        fh.flush()

    return emit
