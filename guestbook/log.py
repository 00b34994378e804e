"""Shared logging setup; everything goes to stderr."""
import logging
import os


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a named logger, configuring the root logger on first use.

    Level comes from the LOG_LEVEL env var, INFO by default.
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_str, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            level=level,
        )
    logger = logging.getLogger(name or "guestbook")
    logger.setLevel(level)
    return logger
