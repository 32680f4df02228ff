"""
Logging configuration for memwatch.

Provides centralized logging setup with clean, concise terminal output.
Console output goes to stderr so the monitored command keeps stdout to itself.
"""
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

_configured_loggers: Dict[str, logging.Logger] = {}


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    # Clean format: [LEVEL] message
    console_formatter = logging.Formatter(
        fmt='[%(levelname)s] %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Optional file handler with more detailed format
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _configured_loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    """
    Change the level of every logger created through setup_logger.

    Loggers are created at import time with the default level, so CLI flags
    such as --verbose have to re-level them afterwards.
    """
    for logger in _configured_loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            if isinstance(handler, logging.FileHandler):
                continue
            handler.setLevel(level)
