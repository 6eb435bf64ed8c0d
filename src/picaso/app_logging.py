"""Logging configuration helpers."""

import logging

_LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``picaso`` logger and set its level.

    Calling it again only updates the level, so app factories used by tests
    can run it repeatedly without stacking handlers.
    """
    logger = logging.getLogger("picaso")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
