# backend/empdb/utils/logger.py
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from empdb import config

LOGGER_NAME = "empdb"


def setup_logging(level: Union[int, str, None] = None,
                  log_path: Optional[Path] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level or config.LOG_LEVEL)
    log_path = log_path or config.LOG_PATH

    # Prevent duplicate handlers if called more than once
    if not any(getattr(h, "_empdb", False) for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        stream_handler._empdb = True
        logger.addHandler(stream_handler)

        if log_path:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            file_handler._empdb = True
            logger.addHandler(file_handler)

    return logger
