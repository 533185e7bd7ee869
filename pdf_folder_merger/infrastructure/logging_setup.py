from __future__ import annotations

import logging

from pdf_folder_merger.infrastructure.config import AppConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    level = AppConfig().log_level
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
