"""Console logging for the whole application. Modules only ever call logging.getLogger(__name__)."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single console handler to the application's root logger ('src')."""
    logger = logging.getLogger("src")
    logger.setLevel(level)

    # Prevent duplicate handlers when called more than once (tests, reloads)
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
