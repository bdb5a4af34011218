"""
Logging setup

Console output plus two rotating files next to LOG_FILE:
app.log (every level) and error.log (errors only).
"""
import logging
import os
from logging.handlers import RotatingFileHandler

from ..config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 14


def setup_logging(level: str = None, log_file: str = None) -> logging.Logger:
    """Configure the root logger once; safe to call again on reload"""
    level = (level or settings.LOG_LEVEL).upper()
    log_file = log_file or settings.LOG_FILE

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, "_hotspot_configured", False):
        return root

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        app_handler = RotatingFileHandler(log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
        app_handler.setFormatter(formatter)
        root.addHandler(app_handler)

        error_handler = RotatingFileHandler(
            os.path.join(log_dir, "error.log") if log_dir else "error.log",
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root.addHandler(error_handler)

    root._hotspot_configured = True
    return root
