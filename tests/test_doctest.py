# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import doctest
import logging

from bytesync import config, filter, log, results

logger = logging.getLogger("bytesync.tests")

def load_tests(loader, tests, ignore):
	logger.info("Adding doctests to unittest.")
	tests.addTests(doctest.DocTestSuite(config))
	tests.addTests(doctest.DocTestSuite(filter))
	tests.addTests(doctest.DocTestSuite(log))
	tests.addTests(doctest.DocTestSuite(results))
	return tests
