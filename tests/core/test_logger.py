"""
Unit tests for Logger functionality.

Tests formatter and handler strategies, the trade context filter,
logger configuration and the application logger factory.
"""

import logging
import logging.handlers
import tempfile
import unittest
from pathlib import Path

from trade_discipline.core.logger import (
    ConsoleLogHandler,
    FileLogHandler,
    JournalLogFormatter,
    LoggerManager,
    StandardLogFormatter,
    TradeContextFilter,
    _managers,
    create_app_logger,
    get_module_logger,
    parse_log_level,
)


def make_record(**extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStandardLogFormatter(unittest.TestCase):
    """Test cases for StandardLogFormatter."""

    def test_formatter_with_module(self):
        formatter = StandardLogFormatter(include_module=True).get_formatter()

        self.assertIsInstance(formatter, logging.Formatter)
        self.assertIn("%(name)s", formatter._fmt)

    def test_formatter_without_module(self):
        formatter = StandardLogFormatter(include_module=False).get_formatter()
        self.assertNotIn("%(name)s", formatter._fmt)


class TestJournalLogFormatter(unittest.TestCase):
    def test_includes_trade_id(self):
        formatter = JournalLogFormatter().get_formatter()

        self.assertIn("%(trade_id)", formatter._fmt)
        self.assertIn("%(levelname)", formatter._fmt)


class TestTradeContextFilter(unittest.TestCase):
    """Test cases for TradeContextFilter."""

    def test_default_placeholder(self):
        record = make_record()

        self.assertTrue(TradeContextFilter().filter(record))
        self.assertEqual(record.trade_id, "-")

    def test_filter_trade_id(self):
        record = make_record()
        TradeContextFilter("trade_abc").filter(record)
        self.assertEqual(record.trade_id, "trade_abc")

    def test_extra_trade_id_kept(self):
        """An id passed through ``extra`` wins over the filter's id."""
        record = make_record(trade_id="trade_xyz")
        TradeContextFilter("trade_abc").filter(record)
        self.assertEqual(record.trade_id, "trade_xyz")

    def test_record_formats_with_journal_formatter(self):
        record = make_record()
        TradeContextFilter().filter(record)

        output = JournalLogFormatter().get_formatter().format(record)
        self.assertIn("| -", output)


class TestConsoleLogHandler(unittest.TestCase):
    def test_create_console_handler(self):
        formatter = StandardLogFormatter().get_formatter()
        handler = ConsoleLogHandler(level=logging.DEBUG).create_handler(formatter)

        self.assertIsInstance(handler, logging.StreamHandler)
        self.assertEqual(handler.level, logging.DEBUG)
        self.assertTrue(
            any(isinstance(f, TradeContextFilter) for f in handler.filters)
        )


class TestFileLogHandler(unittest.TestCase):
    """Test cases for FileLogHandler."""

    def test_create_file_handler_in_new_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "app.log"
            handler = FileLogHandler(
                str(path), level=logging.INFO, max_bytes=1024, backup_count=3
            ).create_handler(StandardLogFormatter().get_formatter())
            try:
                self.assertIsInstance(handler, logging.handlers.RotatingFileHandler)
                self.assertEqual(handler.level, logging.INFO)
                self.assertEqual(handler.maxBytes, 1024)
                self.assertEqual(handler.backupCount, 3)
                self.assertTrue(path.parent.is_dir())
            finally:
                handler.close()


class TestLoggerManager(unittest.TestCase):
    """Test cases for LoggerManager."""

    def setUp(self):
        self.logger_manager = LoggerManager("test_logger")

    def tearDown(self):
        self.logger_manager.configure_logger(handlers={})

    def test_configure_logger(self):
        self.logger_manager.configure_logger(
            level=logging.DEBUG,
            formatter=StandardLogFormatter(),
            handlers={"console": ConsoleLogHandler(level=logging.INFO)},
        )

        logger = self.logger_manager.get_logger()
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

    def test_reconfigure_replaces_handlers(self):
        self.logger_manager.configure_logger()
        self.logger_manager.configure_logger()

        self.assertEqual(len(self.logger_manager.get_logger().handlers), 1)

    def test_get_logger_before_configuration(self):
        with self.assertRaises(RuntimeError):
            self.logger_manager.get_logger()

    def test_update_log_level(self):
        self.logger_manager.configure_logger(level=logging.INFO)
        self.logger_manager.update_log_level(logging.ERROR)

        self.assertEqual(self.logger_manager.get_logger().level, logging.ERROR)
        self.assertEqual(self.logger_manager.get_handler("console").level, logging.ERROR)

    def test_get_handler(self):
        self.logger_manager.configure_logger()

        self.assertIsNotNone(self.logger_manager.get_handler("console"))
        self.assertIsNone(self.logger_manager.get_handler("nonexistent"))


class TestCreateAppLogger(unittest.TestCase):
    """Test cases for create_app_logger factory function."""

    def test_console_only_by_default(self):
        logger = create_app_logger(log_level="DEBUG", name="test_app")

        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

    def test_file_handler_with_log_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            logger = create_app_logger(log_dir=tmp, name="test_app_file")
            try:
                self.assertEqual(len(logger.handlers), 2)
                self.assertEqual(len(list(Path(tmp).glob("test_app_file_*.log"))), 1)
            finally:
                # release the file before the directory is removed
                create_app_logger(name="test_app_file")

    def test_repeated_calls_reuse_manager(self):
        """Reconfiguring replaces handlers instead of stacking them."""
        create_app_logger(name="test_app_reuse")
        manager = _managers["test_app_reuse"]

        logger = create_app_logger(log_level="ERROR", name="test_app_reuse")

        self.assertIs(_managers["test_app_reuse"], manager)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(manager.get_handler("console").level, logging.ERROR)

    def test_invalid_level_defaults_to_info(self):
        logger = create_app_logger(log_level="INVALID", name="test_app")
        self.assertEqual(logger.level, logging.INFO)

    def test_parse_log_level(self):
        self.assertEqual(parse_log_level("warning"), logging.WARNING)
        self.assertEqual(parse_log_level("nope"), logging.INFO)


class TestGetModuleLogger(unittest.TestCase):
    def test_get_module_logger(self):
        logger = get_module_logger("lifecycle")
        self.assertEqual(logger.name, "trade_discipline.lifecycle")

    def test_already_prefixed(self):
        logger = get_module_logger("trade_discipline.analysis")
        self.assertEqual(logger.name, "trade_discipline.analysis")


if __name__ == "__main__":
    unittest.main()
