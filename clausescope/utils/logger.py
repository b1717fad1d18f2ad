"""Package-wide logging setup.

Every module logs through a child of the ``clausescope`` logger so a single
handler (stderr) and a single level apply to the whole pipeline.
"""
from __future__ import annotations
import logging
import os
import sys

ROOT_LOGGER = "clausescope"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach the stream handler once; later calls only adjust the level."""
    global _configured
    root = logging.getLogger(ROOT_LOGGER)
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, lvl, logging.INFO))
    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        _configured = True
    return root


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    if not _configured:
        configure_logging()
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


logger = get_logger()
