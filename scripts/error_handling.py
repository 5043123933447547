#!/usr/bin/env python3
"""
error_handling.py - Standardized logging and exit handling for the KPI scripts

Every script tags its messages with a component name. Messages are printed
in colour to stderr; errors and critical messages are also appended to an
error log file so failed runs can be inspected afterwards.
"""

import os
import sys
import logging
from datetime import datetime
from typing import Optional
from pathlib import Path
from enum import Enum

DEFAULT_ERROR_LOG = "kpi_errors.log"

# ===== ERROR LOGGING FUNCTIONS =====

class LogLevel(Enum):
    """Enumeration for log severity levels."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class ColorCodes:
    """ANSI color codes for terminal output."""
    RED = '\033[0;31m'
    YELLOW = '\033[1;33m'
    GREEN = '\033[0;32m'
    BLUE = '\033[0;34m'
    PURPLE = '\033[0;35m'
    NC = '\033[0m'  # No Color

class ErrorHandler:
    """Main error handling class providing component-tagged logging."""

    def __init__(self, error_log_file: Optional[str] = None):
        """
        Initialize the error handler.

        Args:
            error_log_file: Path to the error log file. Defaults to the
                KPI_ERROR_LOG environment variable, then kpi_errors.log.
        """
        if error_log_file is None:
            error_log_file = os.getenv("KPI_ERROR_LOG", DEFAULT_ERROR_LOG)
        self.error_log_file = Path(error_log_file)
        self._setup_file_logger()

    def _setup_file_logger(self):
        """Set up file logging for errors and critical messages."""
        self.file_logger = logging.getLogger(f'kpi_errors.{self.error_log_file}')
        self.file_logger.setLevel(logging.ERROR)
        self.file_logger.propagate = False

        if self.file_logger.handlers:
            return

        # File is only created once something is logged
        file_handler = logging.FileHandler(self.error_log_file, mode='a', delay=True)
        file_handler.setLevel(logging.ERROR)

        formatter = logging.Formatter('%(asctime)s [%(levelname)s] [%(component)s] %(message)s',
                                    datefmt='%Y-%m-%d %H:%M:%S')
        file_handler.setFormatter(formatter)

        self.file_logger.addHandler(file_handler)

    def log_message(self, level: LogLevel, component: str, message: str) -> None:
        """
        Log a message with timestamp and severity level.

        Args:
            level: Severity level of the message
            component: Component name generating the log
            message: The log message
        """
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

        color_map = {
            LogLevel.INFO: ColorCodes.GREEN,
            LogLevel.WARNING: ColorCodes.YELLOW,
            LogLevel.ERROR: ColorCodes.RED,
            LogLevel.CRITICAL: ColorCodes.PURPLE
        }
        color = color_map.get(level, ColorCodes.BLUE)

        # stdout is reserved for the computed statistics
        print(f"{color}{timestamp} [{level.value}] [{component}] {message}{ColorCodes.NC}",
              file=sys.stderr)

        if level in [LogLevel.ERROR, LogLevel.CRITICAL]:
            self.file_logger.log(
                logging.ERROR if level == LogLevel.ERROR else logging.CRITICAL,
                message,
                extra={'component': component}
            )

    def log_info(self, component: str, message: str) -> None:
        """Log an info message."""
        self.log_message(LogLevel.INFO, component, message)

    def log_warning(self, component: str, message: str) -> None:
        """Log a warning message."""
        self.log_message(LogLevel.WARNING, component, message)

    def log_error(self, component: str, message: str) -> None:
        """Log an error message."""
        self.log_message(LogLevel.ERROR, component, message)

    def log_critical(self, component: str, message: str) -> None:
        """Log a critical message."""
        self.log_message(LogLevel.CRITICAL, component, message)

# ===== UTILITY FUNCTIONS =====

def handle_exit(exit_code: int, component: str, message: str,
                error_handler: Optional[ErrorHandler] = None) -> None:
    """
    Handle script exit with logging.

    Args:
        exit_code: Exit code to use
        component: Component name for logging
        message: Exit message
        error_handler: Optional ErrorHandler instance
    """
    if error_handler is None:
        error_handler = get_default_handler()

    if exit_code == 0:
        error_handler.log_info(component, f"Script completed successfully: {message}")
    else:
        error_handler.log_critical(component, f"Script failed with exit code {exit_code}: {message}")

    sys.exit(exit_code)

def configure_library_logging(verbose: bool = False) -> None:
    """Route the kpi package's loggers to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )

# ===== CONVENIENCE FUNCTIONS =====

_default_error_handler = None

def get_default_handler() -> ErrorHandler:
    """Get or create the default handler instance."""
    global _default_error_handler

    if _default_error_handler is None:
        _default_error_handler = ErrorHandler()

    return _default_error_handler

def log_info(component: str, message: str) -> None:
    """Log an info message using the default handler."""
    get_default_handler().log_info(component, message)

def log_warning(component: str, message: str) -> None:
    """Log a warning message using the default handler."""
    get_default_handler().log_warning(component, message)

def log_error(component: str, message: str) -> None:
    """Log an error message using the default handler."""
    get_default_handler().log_error(component, message)

def log_critical(component: str, message: str) -> None:
    """Log a critical message using the default handler."""
    get_default_handler().log_critical(component, message)

def log_success(component: str, message: str) -> None:
    """Log a success message (displayed as info with green color) using the default handler."""
    get_default_handler().log_info(component, f"✓ {message}")
