from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install a single console handler on the package logger."""
    logger = logging.getLogger("face_attendance")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Avoid stacking handlers when the app factory runs more than once.
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
