"""Logging configuration with timestamps and session IDs."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from shopchat.config import get_log_file, get_log_level

LOGGER_NAME = "shopchat"


class SessionFormatter(logging.Formatter):
    """Formatter that stamps each record with an ISO timestamp and a session ID."""

    def __init__(self, session_id: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.session_id = session_id

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'session_id'):
            record.session_id = self.session_id or "N/A"
        record.iso_timestamp = datetime.now().isoformat()
        return super().format(record)


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    session_id: Optional[str] = None
) -> logging.Logger:
    """
    Set up the shopchat logger with file and console handlers.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (default: logs/shopchat.log)
        session_id: Optional session ID stamped on every record
    
    Returns:
        Configured logger instance
    """
    if log_file is None:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)
        log_file = str(log_dir / "shopchat.log")
    else:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Re-running setup replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = SessionFormatter(
        session_id=session_id,
        fmt='[%(iso_timestamp)s] [%(session_id)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_logger(session_id: Optional[str] = None) -> logging.Logger:
    """
    Get the shopchat logger, configuring it from the environment on first use.
    
    Args:
        session_id: Optional session ID
    
    Returns:
        Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        setup_logger(log_level=get_log_level(), log_file=get_log_file(), session_id=session_id)
    return logger
