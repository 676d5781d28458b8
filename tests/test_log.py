# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import io
import unittest
import logging
import tempfile
from pathlib import Path
from unittest import mock

from bytesync import log
from bytesync.log import TRACE, _RecordTag

logger = logging.getLogger("bytesync.tests")

class TestLogging(unittest.TestCase):

	def tearDown(self):
		log.setup_logging()

	def setup(self, **kwargs) -> tuple[io.StringIO, io.StringIO]:
		stdout, stderr = io.StringIO(), io.StringIO()
		with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
			log.setup_logging(**kwargs)
		return stdout, stderr

	def test_console(self):
		stdout, stderr = self.setup(print_level=logging.INFO)
		log.logger.log(TRACE, "trace line", extra=_RecordTag.SYNC_OP.dict())
		log.logger.info("info line")
		log.logger.warning("warning line")
		log.logger.error("first\nsecond")

		self.assertEqual(stdout.getvalue(), "  info line\n")
		self.assertEqual(stderr.getvalue(), "  warning line\n  first\n  second\n")

	def test_console__trace(self):
		stdout, stderr = self.setup(print_level=TRACE)
		log.logger.log(TRACE, "Copying: a -> b", extra=_RecordTag.SYNC_OP.dict())
		log.logger.debug("debug line")
		self.assertEqual(stdout.getvalue(), "  Copying: a -> b\n    debug line\n")
		self.assertEqual(stderr.getvalue(), "")

	def test_console__hidden_tags(self):
		stdout, _ = self.setup(tags_to_hide={_RecordTag.HEADER})
		log.logger.info("header", extra=_RecordTag.HEADER.dict())
		log.logger.info("footer", extra=_RecordTag.FOOTER.dict())
		self.assertEqual(stdout.getvalue(), "  footer\n")

	def test_file(self):
		with tempfile.TemporaryDirectory() as temp_root:
			log_file = Path(temp_root) / "sync.log"
			self.setup(print_level=logging.CRITICAL, log_file=log_file, file_level=TRACE)
			self.assertEqual(log.logger.level, TRACE)

			log.logger.log(TRACE, "Deleting: x", extra=_RecordTag.SYNC_OP.dict())
			log.logger.info("   ")
			log.logger.warning("careful")
			log.logger.critical("halted")

			# close the file before the temp dir is removed
			log.setup_logging()

			lines = log_file.read_text(encoding="utf-8").splitlines()
			self.assertEqual(len(lines), 3)
			self.assertTrue(lines[0].endswith(" Deleting: x"))
			self.assertTrue(lines[1].endswith(" WARNING: careful"))
			self.assertTrue(lines[2].endswith(" *** CRITICAL ***: halted"))

	def test_setup__idempotent(self):
		self.setup()
		self.setup()
		self.assertEqual(len(log.logger.handlers), 2)
		self.assertFalse(log.logger.propagate)
