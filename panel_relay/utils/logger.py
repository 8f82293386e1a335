import sys
from pathlib import Path
from loguru import logger
from typing import Optional, TextIO
from .config import get_settings

def setup_logger(
    log_file: Optional[Path] = None,
    log_level: str = "INFO",
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure the logger with the specified settings.

    Tracebacks are logged without variable values, so request payloads and
    inline image data never reach the sinks.

    Args:
        log_file: Path to a rotated log file, or None for the stream only
        log_level: Logging level
        stream: Stream sink, stderr when omitted
    """
    # Remove default handler
    logger.remove()

    # Function logs are collected from stderr by the hosting platform
    logger.add(
        stream or sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level=log_level,
        backtrace=False,
        diagnose=False
    )

    if log_file:
        logger.add(
            str(log_file),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=log_level,
            rotation="50 MB",
            retention="10 days",
            backtrace=False,
            diagnose=False
        )

_settings = get_settings()
setup_logger(log_file=_settings.log_file, log_level=_settings.log_level)

__all__ = ['logger', 'setup_logger']
