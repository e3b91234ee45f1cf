"""
Logging system for the trade discipline assistant.

Provides formatter and handler strategies, a LoggerManager that wires
them onto the package root logger, and a filter that stamps the trade
identifier onto every record emitted while a trade is being handled.
"""

import logging
import logging.handlers
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

ROOT_LOGGER_NAME = "trade_discipline"

# One manager per logger name; reconfiguring replaces its handlers.
_managers: Dict[str, "LoggerManager"] = {}

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ILogFormatter(ABC):
    """Interface for log formatting strategies."""

    @abstractmethod
    def get_formatter(self) -> logging.Formatter:
        """
        Get configured log formatter.

        Returns:
            logging.Formatter: Configured formatter instance
        """


class StandardLogFormatter(ILogFormatter):
    """Plain timestamp, level and message format."""

    def __init__(self, include_module: bool = True) -> None:
        """
        Initialize standard formatter.

        Args:
            include_module: Whether to include the logger name
        """
        self._include_module = include_module

    def get_formatter(self) -> logging.Formatter:
        """Build the formatter, with or without the logger name column."""
        if self._include_module:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(asctime)s - %(levelname)s - %(message)s"

        return logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")


class JournalLogFormatter(ILogFormatter):
    """Column format that includes the trade id stamped by TradeContextFilter."""

    def get_formatter(self) -> logging.Formatter:
        """Build the column formatter; records must carry ``trade_id``."""
        format_string = (
            "%(asctime)s | %(levelname)-8s | %(name)-36s | "
            "%(trade_id)-20s | %(message)s"
        )
        return logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")


class TradeContextFilter(logging.Filter):
    """Stamps ``trade_id`` onto log records.

    Records that already carry a ``trade_id`` (passed via ``extra``) keep
    it; all others get the filter's current id, or ``"-"`` when unset.
    """

    def __init__(self, trade_id: Optional[str] = None) -> None:
        super().__init__()
        self.trade_id = trade_id

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Stamp the trade id onto ``record``.

        Args:
            record: Record being emitted

        Returns:
            bool: Always True, records are never dropped
        """
        if not getattr(record, "trade_id", None):
            record.trade_id = self.trade_id or "-"
        return True


class ILogHandler(ABC):
    """Interface for log handler creation strategies."""

    @abstractmethod
    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        """
        Create configured log handler.

        Args:
            formatter: Log formatter to use

        Returns:
            logging.Handler: Configured handler instance
        """


class ConsoleLogHandler(ILogHandler):
    """Creates console log handler for stderr output."""

    def __init__(self, level: int = logging.INFO) -> None:
        """
        Initialize console handler strategy.

        Args:
            level: Logging level for console output
        """
        self._level = level

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        """Create a stderr handler carrying the trade context filter."""
        handler = logging.StreamHandler()
        handler.setLevel(self._level)
        handler.setFormatter(formatter)
        handler.addFilter(TradeContextFilter())
        return handler


class FileLogHandler(ILogHandler):
    """Creates a size-rotated file handler."""

    def __init__(
        self,
        log_file_path: str,
        level: int = logging.DEBUG,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        """
        Initialize file log handler.

        Args:
            log_file_path: Path to log file
            level: Logging level for file output
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep
        """
        self._log_file_path = Path(log_file_path)
        self._level = level
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        """
        Create the rotating file handler, making the log directory if needed.

        Args:
            formatter: Log formatter to use

        Returns:
            logging.Handler: Rotating file handler with the trade context filter
        """
        self._log_file_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=str(self._log_file_path),
            maxBytes=self._max_bytes,
            backupCount=self._backup_count,
            encoding="utf-8",
        )
        handler.setLevel(self._level)
        handler.setFormatter(formatter)
        handler.addFilter(TradeContextFilter())
        return handler


class LoggerManager:
    """
    Central logger manager.

    Owns the handlers attached to one named logger so they can be
    reconfigured or re-levelled together.
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME) -> None:
        """
        Initialize logger manager.

        Args:
            name: Name of the logger to manage
        """
        self._logger_name = name
        self._logger: Optional[logging.Logger] = None
        self._handlers: Dict[str, logging.Handler] = {}
        self._is_configured = False

    def configure_logger(
        self,
        level: int = logging.INFO,
        formatter: Optional[ILogFormatter] = None,
        handlers: Optional[Dict[str, ILogHandler]] = None,
    ) -> None:
        """
        Configure logger with specified settings.

        Args:
            level: Base logging level
            formatter: Log formatter strategy
            handlers: Dictionary of handler name to handler strategy
        """
        self._logger = logging.getLogger(self._logger_name)
        self._logger.setLevel(level)

        for handler in self._handlers.values():
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()

        if formatter is None:
            formatter = StandardLogFormatter()
        log_formatter = formatter.get_formatter()

        if handlers is None:
            handlers = {"console": ConsoleLogHandler(level=level)}

        for handler_name, handler_strategy in handlers.items():
            handler = handler_strategy.create_handler(log_formatter)
            self._logger.addHandler(handler)
            self._handlers[handler_name] = handler

        self._is_configured = True

    def get_logger(self) -> logging.Logger:
        """
        Get configured logger instance.

        Raises:
            RuntimeError: If logger not configured
        """
        if not self._is_configured or self._logger is None:
            raise RuntimeError("Logger not configured. Call configure_logger() first.")

        return self._logger

    def update_log_level(self, level: int) -> None:
        """
        Update logging level for the logger and all its handlers.

        Args:
            level: New logging level
        """
        if self._logger:
            self._logger.setLevel(level)
            for handler in self._handlers.values():
                handler.setLevel(level)

    def get_handler(self, handler_name: str) -> Optional[logging.Handler]:
        """
        Get a configured handler by name.

        Args:
            handler_name: Name the handler was configured under

        Returns:
            Optional[logging.Handler]: The handler, or None if unknown
        """
        return self._handlers.get(handler_name)


def parse_log_level(log_level: str) -> int:
    """
    Map a level name to its logging constant.

    Args:
        log_level: Level name, case-insensitive

    Returns:
        int: Logging constant, INFO for unknown names
    """
    return _LEVELS.get(str(log_level).upper(), logging.INFO)


def create_app_logger(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """
    Factory function to create the pre-configured application logger.

    Console output is always enabled; a dated rotating log file is added
    when ``log_dir`` is given.

    Args:
        log_level: Logging level as string
        log_dir: Optional directory for log files
        name: Logger name

    Returns:
        logging.Logger: Configured logger instance
    """
    level = parse_log_level(log_level)

    handlers: Dict[str, ILogHandler] = {"console": ConsoleLogHandler(level=level)}
    if log_dir:
        log_file = Path(log_dir) / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
        handlers["file"] = FileLogHandler(str(log_file), level=level)

    if name not in _managers:
        _managers[name] = LoggerManager(name)
    manager = _managers[name]
    manager.configure_logger(
        level=level, formatter=JournalLogFormatter(), handlers=handlers
    )
    return manager.get_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get logger for specific module.

    Args:
        module_name: Name of the module

    Returns:
        logging.Logger: Child of the package root logger
    """
    if module_name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
