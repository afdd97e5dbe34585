"""
Logging Configuration Module
===========================

Controls logging levels and output formatting for the stream client.
Provides logging modes for development, quiet library use, and production.
"""

import sys
from enum import Enum
from typing import Optional
from loguru import logger


class LogLevel(Enum):
    """Logging levels for different client modes"""
    SILENT = "SILENT"           # Only critical errors
    QUIET = "QUIET"             # Errors and warnings only
    NORMAL = "NORMAL"           # Connection lifecycle, warnings, and errors
    VERBOSE = "VERBOSE"         # Every frame decision
    TRACE = "TRACE"             # All logging including trace


LEVEL_MAPPING = {
    LogLevel.SILENT: "CRITICAL",
    LogLevel.QUIET: "WARNING",
    LogLevel.NORMAL: "INFO",
    LogLevel.VERBOSE: "DEBUG",
    LogLevel.TRACE: "TRACE"
}

# Noisy per-frame modules, muted in quiet mode
FRAME_MODULES = [
    "mexc_stream.streaming.dispatcher",
    "mexc_stream.streaming.registry",
]


class LogConfig:
    """Logging configuration manager"""

    def __init__(self):
        self.current_level = LogLevel.NORMAL
        self._initialized = False
        self._console_sink: Optional[int] = None

    def setup_logging(self,
                      level: LogLevel = LogLevel.NORMAL,
                      show_backtrace: bool = False,
                      show_diagnose: bool = False) -> None:
        """
        Configure console logging for the client

        Args:
            level: Logging level to use
            show_backtrace: Show full backtraces on errors
            show_diagnose: Show diagnostic information
        """
        # Replace only our own console sink, leave sinks added by the host application
        if self._console_sink is not None:
            logger.remove(self._console_sink)
        elif not self._initialized:
            logger.remove()

        logger.configure(extra={"component": "mexc_stream"})

        if level in (LogLevel.SILENT, LogLevel.QUIET):
            format_str = "<level>{level}</level> | {extra[component]} | {message}"
        elif level == LogLevel.NORMAL:
            format_str = ("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
                          "<cyan>{extra[component]}</cyan> | {message}")
        else:
            format_str = ("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                          "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | {message}")

        self._console_sink = logger.add(
            sys.stderr,
            format=format_str,
            level=LEVEL_MAPPING[level],
            backtrace=show_backtrace,
            diagnose=show_diagnose,
            colorize=True
        )

        self.current_level = level
        self._initialized = True

    def set_quiet_mode(self) -> None:
        """Library use inside a larger application - warnings and errors only"""
        self.setup_logging(level=LogLevel.QUIET)
        self.suppress_module_logging(FRAME_MODULES)

    def set_development_mode(self) -> None:
        """Configure logging for development - full output"""
        self.enable_module_logging(FRAME_MODULES)
        self.setup_logging(
            level=LogLevel.VERBOSE,
            show_backtrace=True,
            show_diagnose=True
        )

    def set_production_mode(self) -> None:
        """Configure logging for production - balanced output"""
        self.setup_logging(level=LogLevel.NORMAL)

    def set_silent_mode(self) -> None:
        """Configure logging for silent operation - critical errors only"""
        self.setup_logging(level=LogLevel.SILENT)

    def add_file_logging(self,
                         filepath: str,
                         level: LogLevel = LogLevel.VERBOSE,
                         rotation: str = "10 MB",
                         retention: str = "7 days") -> int:
        """
        Add file logging in addition to console

        Args:
            filepath: Path to log file
            level: Logging level for file
            rotation: File rotation policy
            retention: Log retention policy

        Returns:
            loguru sink id, usable with ``logger.remove``
        """
        file_format = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]}:{function}:{line} | {message}"

        sink_id = logger.add(
            filepath,
            format=file_format,
            level=LEVEL_MAPPING[level],
            rotation=rotation,
            retention=retention,
            backtrace=True,
            diagnose=False
        )
        logger.info(f"File logging enabled: {filepath}")
        return sink_id

    def suppress_module_logging(self, modules: list[str]) -> None:
        """Disable loguru records emitted from the given modules"""
        for module in modules:
            logger.disable(module)

    def enable_module_logging(self, modules: list[str]) -> None:
        """Re-enable logging for specific modules"""
        for module in modules:
            logger.enable(module)


# Global log configuration instance
log_config = LogConfig()


def setup_quiet_logging():
    """Quick setup for embedding the client - warnings only"""
    log_config.set_quiet_mode()


def setup_development_logging():
    """Quick setup for development - full logging"""
    log_config.set_development_mode()


def setup_production_logging():
    """Quick setup for production - balanced logging"""
    log_config.set_production_mode()


def setup_silent_logging():
    """Quick setup for silent operation"""
    log_config.set_silent_mode()


def get_logger(name: str):
    """
    Get a logger bound to a client component

    Args:
        name: Component name shown in every record

    Returns:
        Logger instance
    """
    if not log_config._initialized:
        log_config.setup_logging()

    return logger.bind(component=name)
