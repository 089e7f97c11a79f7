"""
Logging configuration for the HR backend.

All modules log through ``logging.getLogger(__name__)``, which places them
under the ``hr_backend`` logger tree configured here.
"""

import logging

LOGGER_NAME = "hr_backend"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the ``hr_backend`` logger.

    Calling this again only updates the level.

    Args:
        level: Level name such as "DEBUG" or "INFO"

    Returns:
        The configured package logger
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        _configured = True

    return logger
