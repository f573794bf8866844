"""
Tests for logging setup and the category / CI formatters.
"""

import logging
import tempfile
import unittest
from pathlib import Path

from multifile_downloader.utils.log import (
    _CIFormatter,
    _apply_category_styles,
    log,
    setup_logging,
)


def _remove_handlers():
    for handler in list(log.handlers):
        handler.close()
        log.removeHandler(handler)


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        _remove_handlers()

    def test_info_by_default(self):
        setup_logging()
        self.assertEqual(log.level, logging.INFO)
        self.assertEqual(len(log.handlers), 1)
        self.assertFalse(log.propagate)

    def test_debug(self):
        setup_logging(debug=True)
        self.assertEqual(log.level, logging.DEBUG)
        self.assertEqual(log.handlers[0].level, logging.DEBUG)

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()
        self.assertEqual(len(log.handlers), 1)

    def test_log_file_captures_debug(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "run.log"
            setup_logging(log_file=str(path))
            self.assertEqual(log.level, logging.DEBUG)
            self.assertEqual(log.handlers[0].level, logging.INFO)
            log.debug("detail only in file")
            for handler in log.handlers:
                handler.flush()
            self.assertIn("detail only in file", path.read_text(encoding="utf-8"))
            _remove_handlers()


class TestFormatters(unittest.TestCase):
    def test_category_tag_highlighted(self):
        styled = _apply_category_styles("[AUTH] Login successful")
        self.assertIn("[AUTH]", styled)
        self.assertIn("\033[", styled)
        self.assertTrue(styled.endswith("Login successful"))

    def test_untagged_message_unchanged(self):
        self.assertEqual(_apply_category_styles("plain"), "plain")

    def test_ci_prefixes(self):
        fmt = _CIFormatter("%(message)s")
        warn = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        info = logging.LogRecord("x", logging.INFO, __file__, 1, "fine", None, None)
        self.assertEqual(fmt.format(warn), "::warning::careful")
        self.assertEqual(fmt.format(info), "fine")


if __name__ == "__main__":
    unittest.main()
