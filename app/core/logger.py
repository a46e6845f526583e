import logging
import sys
from app.core.config import settings

def setup_logging():
    """
    Configure the application logger.

    Child loggers (careschedule.recurrence, careschedule.cache, ...) propagate
    to this one, so the scheduling core can log without importing settings.
    """
    logger = logging.getLogger("careschedule")
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger

logger = setup_logging()
