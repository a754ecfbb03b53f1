"""Logging setup shared by the server entry points."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Set the root handler and align the game and uvicorn loggers on one level.

    ``level`` wins over ``SNAKE_LOG_LEVEL``; INFO when neither is set.
    """
    resolved = (level or os.getenv("SNAKE_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    for name in ("solo_snake", "uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(resolved)

    return logging.getLogger("solo_snake")
