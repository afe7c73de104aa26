"""
Unit tests for logging utilities.
"""

import logging
import os
import tempfile
import unittest

from log_utils import setup_logging


class TestLogUtils(unittest.TestCase):
    """Test logging utilities."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.log_file = os.path.join(self.tmpdir.name, "cloner.log")

    def tearDown(self):
        for handler in logging.getLogger().handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)
        self.tmpdir.cleanup()

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging(log_file=self.log_file)
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logging.getLogger().level, logging.INFO)

    def test_setup_logging_verbose(self):
        """Test verbose logging setup."""
        setup_logging(verbose=True, log_file=self.log_file, level="error")
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_setup_logging_level(self):
        """Test named levels."""
        setup_logging(log_file=self.log_file, level="warn")
        self.assertEqual(logging.getLogger().level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
