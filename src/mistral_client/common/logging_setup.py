"""Central logging setup for the CLI and the proxy."""
from __future__ import annotations
import logging
import os
import sys

def setup_logging(level: int | str | None = None) -> None:
    """
    Configure root logger for entrypoints.

    Library modules only create `mistral_client.*` loggers; handlers are
    installed here and nowhere else.

    Args:
        level: Logging level or level name. Defaults to MISTRAL_LOG_LEVEL, else INFO.
    """
    if level is None:
        level = os.getenv("MISTRAL_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    # httpx logs every request at INFO; the client has its own toggles for that
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
