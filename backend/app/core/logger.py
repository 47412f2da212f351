# backend/app/core/logger.py

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from app.core.config_loader import settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"

LOG_DIR = Path(settings.LOG_DIR or Path(__file__).resolve().parents[2] / "logs")
LOG_FILE = LOG_DIR / "travel_agent.log"

ROOT_LOGGER_NAME = "travel_agent"


def _build_handlers() -> List[logging.Handler]:
    """Rotating file (5 MB x 5, INFO and up) plus console at the configured level."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.LOG_LEVEL.upper())

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
    return [file_handler, console_handler]


# -------------------------------------------------------------------
# GLOBAL LOGGER (handlers filter, the logger lets everything through)
# -------------------------------------------------------------------
logger = logging.getLogger(ROOT_LOGGER_NAME)
logger.setLevel(logging.DEBUG)

# uvicorn --reload re-imports this module
if not logger.handlers:
    for _handler in _build_handlers():
        logger.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger sharing the travel_agent handlers, e.g. get_logger("client")."""
    return logger.getChild(name)
