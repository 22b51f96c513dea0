"""
Logging configuration for Survey Engine
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from ..config import LOGS_DIR, ensure_dir

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: bool = False,
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Set up logging for Survey Engine.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Whether to also log to file
        log_dir: Directory for log files (defaults to PROJECT_ROOT/logs)

    Returns:
        The 'survey_engine' logger
    """
    if log_dir is None:
        log_dir = LOGS_DIR

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger("survey_engine")
    logger.setLevel(getattr(logging, level.upper()))

    # Repeated calls replace handlers instead of stacking duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = ensure_dir(Path(log_dir))
        timestamp = datetime.now().strftime("%Y%m%d")
        file_handler = logging.FileHandler(
            log_dir / f"survey_engine_{timestamp}.log"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
