import logging
import sys
from justoo.core.config import settings

def setup_logging():
    """
    Configure the application logger.
    """
    logger = logging.getLogger("justoo")
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))

    if not logger.handlers:
        logger.addHandler(handler)

    return logger

logger = setup_logging()


def get_logger(name: str) -> logging.Logger:
    """Module loggers live under "justoo" (module names already start with it)."""
    return logging.getLogger(name)
