# File: signlink/log_utils/logging_config.py
# DESCRIPTION: Shared logger factory used by every signlink module.

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(name, logfile=None, level=None):
    """
    Return a logger named `name` with a stream handler and, when a log
    directory is configured, a rotating file handler writing to `logfile`.

    The level falls back to LOG_LEVEL from the environment, then INFO.
    Calling this twice for the same name does not duplicate handlers.
    """
    logger = logging.getLogger(name)

    level = level or os.environ.get("LOG_LEVEL", "INFO")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if getattr(logger, "_signlink_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    log_dir = os.environ.get("SIGNLINK_LOG_DIR", "logs")
    if logfile and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, logfile), maxBytes=5 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False  # no duplicate lines via root
    logger._signlink_configured = True
    return logger
