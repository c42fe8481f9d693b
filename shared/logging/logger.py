"""
Festive Bot logging.

Every module logs through a child of the "festive" logger. The parent is
configured on first use with a console handler and one file per process
run under FESTIVE_BOT_LOG_DIR (default ./logs), so the poll loop, the
webhook dispatcher and the checkpoint store all land in the same file.
"""

import logging
import os
from datetime import datetime
from pathlib import Path

LOG_DIR = Path(os.getenv("FESTIVE_BOT_LOG_DIR", "logs"))
ROOT_NAME = "festive"

_LOGGERS = {}


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    root.setLevel(logging.DEBUG)
    root.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    # one file for the whole run; a read-only deployment keeps console only
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        file_handler = logging.FileHandler(
            LOG_DIR / f"{ROOT_NAME}-{timestamp}.log",
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning(f"File logging disabled ({LOG_DIR}): {e}")

    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for one component, e.g. get_logger("core.cycle")."""
    if name in _LOGGERS:
        return _LOGGERS[name]

    if not _LOGGERS:
        _configure_root()

    logger = logging.getLogger(f"{ROOT_NAME}.{name}")
    _LOGGERS[name] = logger
    return logger
