"""Process-wide logging setup shared by the API and the scheduler worker."""
from __future__ import annotations

import logging
import sys

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def configure_logging(log_level: str = "INFO") -> None:
    """Attach a stdout handler to the root logger once and route uvicorn through it."""
    global _configured
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        log = logging.getLogger(logger_name)
        log.handlers = []
        log.propagate = True

    # apscheduler logs every job submission at INFO
    logging.getLogger("apscheduler").setLevel(max(level, logging.WARNING))
    _configured = True
