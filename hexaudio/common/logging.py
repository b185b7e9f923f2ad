# hexaudio/common/logging.py
from __future__ import annotations

import logging


def get_logger(name: str = "hexaudio", level: int | str | None = None) -> logging.Logger:
    """
    Return a named logger. If the process has no handlers configured yet,
    install a basicConfig once so engine output is visible from scripts and tests.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if level is not None:
        logger.setLevel(level)
    return logger
