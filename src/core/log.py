"""Logging setup shared by the CLI and the communication layer.

Modules only ever call `logging.getLogger(__name__)`; handlers are attached
once here by the entry point.
"""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"

_configured = False


def configure_logging(*, level: int | str = logging.WARNING) -> None:
    """Configure root logging once.

    Safe to call multiple times.
    """
    global _configured
    if _configured:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    _configured = True
