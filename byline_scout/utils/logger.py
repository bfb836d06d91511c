"""
Logging setup shared by every module in the package.
"""
import logging
import threading
from logging.handlers import RotatingFileHandler

from byline_scout.config import LOG_DIR, LOG_LEVEL, LOG_TO_FILE

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
ROOT_LOGGER_NAME = "byline_scout"

_configured = False
_configure_lock = threading.Lock()


def _configure_root_logger():
    """Attach handlers to the package root logger once per process."""
    global _configured
    with _configure_lock:
        if _configured:
            return

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(getattr(logging, str(LOG_LEVEL).upper(), logging.INFO))
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        if LOG_TO_FILE:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_DIR / "byline_scout.log", maxBytes=5 * 1024 * 1024, backupCount=3
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Logger that propagates to the configured package root
    """
    _configure_root_logger()
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
