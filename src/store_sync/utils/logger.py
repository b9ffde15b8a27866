"""
Logging configuration for Store Sync.

Provides centralized logging setup with colored console output and an
optional rotating log file. Uses environment variables for configuration
so that loggers can be created before settings are loaded.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import colorlog


class StoreSyncLogger:
    """Centralized logger for the Store Sync service."""

    def __init__(self, name: str = "store_sync"):
        """Initialize logger with the given name."""
        self.name = name
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Setup logger with console and (optionally) file handlers."""
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        log_dir = os.getenv("LOG_DIR", "")
        debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"

        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

        # Loggers are rebuilt on every get_logger() call
        self.logger.handlers.clear()

        self._setup_console_handler(debug_mode)

        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            self._setup_file_handler(log_dir, debug_mode)

        self.logger.propagate = False

    def _setup_console_handler(self, debug_mode: bool) -> None:
        """Setup colored console logging."""
        console_handler = colorlog.StreamHandler(sys.stdout)

        color_format = (
            "%(log_color)s%(asctime)s [%(levelname)8s] "
            "%(name)s.%(funcName)s:%(lineno)d - %(message)s"
        )

        if not debug_mode:
            color_format = (
                "%(log_color)s%(asctime)s [%(levelname)8s] "
                "%(name)s - %(message)s"
            )

        formatter = colorlog.ColoredFormatter(
            color_format,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )

        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, log_dir: str, debug_mode: bool) -> None:
        """Setup file logging with rotation."""
        # All modules share one file per process
        log_file = os.path.join(log_dir, "store_sync.log")

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=5,
            encoding='utf-8'
        )

        file_format = (
            "%(asctime)s [%(levelname)8s] %(name)s.%(funcName)s:%(lineno)d - "
            "%(message)s"
        )

        if not debug_mode:
            file_format = "%(asctime)s [%(levelname)8s] %(name)s - %(message)s"

        formatter = logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S")

        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

    def get_logger(self) -> logging.Logger:
        """Get the configured logger instance."""
        return self.logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        Configured logger instance.
    """
    if name is None:
        frame = sys._getframe(1)
        name = frame.f_globals.get('__name__', 'store_sync')

    return StoreSyncLogger(name).get_logger()


def setup_logging() -> None:
    """
    Setup application-wide logging configuration.

    This should be called once at application startup.
    """
    logger = StoreSyncLogger("store_sync").get_logger()
    logger.info("Logging system initialized")
    logger.debug(f"Log level: {logger.level}")
    logger.debug(f"Handlers: {[h.__class__.__name__ for h in logger.handlers]}")
