"""
Logging configuration for the application.
"""
import logging
import os
import sys

APP_LOGGER_NAME = "llm_chat_bridge"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class ColoredFormatter(logging.Formatter):
    """Custom formatter with log levels."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        levelname = record.levelname
        color = self.COLORS.get(levelname, self.RESET)
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Set up a logger.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)

    formatter = ColoredFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    return logger


def get_logger(component: str) -> logging.Logger:
    """Get a child logger for a component; it inherits the app logger's handler and level."""
    return app_logger.getChild(component)


def set_log_level(level: str) -> None:
    """
    Change the application log level at runtime.

    Args:
        level: One of debug, info, warn, error

    Raises:
        ValueError: If the level name is unknown
    """
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid level. Use one of: {', '.join(LOG_LEVELS)}")

    app_logger.setLevel(LOG_LEVELS[level])


app_logger = setup_logger(
    APP_LOGGER_NAME,
    LOG_LEVELS.get(os.getenv("LOG_LEVEL", "info").lower(), logging.INFO)
)
