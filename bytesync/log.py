import sys
import logging
from enum import Enum
from pathlib import Path

# Summary of logging levels used in this package:
# TRACE    = one line per filesystem action (create, copy, delete)
# DEBUG    = useful for finding bugs
# INFO     = pass started/finished, summary
# WARNING  = problem encountered but the pass continued
# ERROR    = problem encountered and the pass failed
# CRITICAL = Exception raised which halted the program entirely

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

def _exc_summary(e) -> str:
	'''
	Get a one-line summary of an `Exception`.

	>>> _exc_summary(PermissionError(13, "Permission denied", "/tmp/a"))
	'PermissionError: Permission denied: /tmp/a'
	>>> _exc_summary(ValueError("bad value"))
	'bad value'
	'''

	error_type = type(e).__name__
	affected_file = getattr(e, "filename", None)
	error_message = getattr(e, "strerror", None)
	if isinstance(e, OSError) and affected_file and error_message:
		msg = f"{error_type}: {error_message}: {affected_file}"
	elif isinstance(e, OSError) and affected_file:
		msg = f"{error_type}: {affected_file}"
	elif error_message:
		msg = f"{error_type}: {error_message}"
	else:
		msg = str(e)
	return msg

class _RecordTag(Enum):
	HEADER = 1
	FOOTER = 2
	SYNC_OP = 3

	def dict(self):
		return {self.name: True}

class _DebugInfoFilter(logging.Filter):
	'''Logging filter that only allows TRACE, DEBUG and INFO records to pass.'''
	def filter(self, record):
		return record.levelno <= logging.INFO

class _NonEmptyFilter(logging.Filter):
	'''Logging filter that only allows non-empty messages.'''
	def filter(self, record):
		return bool(str(record.msg).strip())

class _TagFilter(logging.Filter):
	'''Logging filter that does not allow messages with certain tags supplied in `extras`.'''
	def __init__(self, enabled:bool = True):
		self.enabled : bool = enabled
		self.hidden  : dict[_RecordTag, bool] = {}
	def __getitem__(self, k:_RecordTag) -> bool:
		return k in self.hidden and self.hidden[k]
	def __setitem__(self, k:_RecordTag, v) -> None:
		self.hidden[k] = v
	def filter(self, record) -> bool:
		if not self.enabled:
			return False
		return not any(self.hidden[k] and bool(getattr(record, k.name, False)) for k in self.hidden)

class _ConsoleFormatter(logging.Formatter):
	BASE_FORMAT = "%(message)s"

	def __init__(self, fmt=BASE_FORMAT, datefmt=None, style="%"):
		super().__init__(fmt, datefmt, style)

	def format(self, record):
		msg = super().format(record)
		extra_indent = "" if getattr(record, _RecordTag.SYNC_OP.name, False) else "  "
		if record.levelno <= logging.DEBUG:
			indent = "  " + extra_indent
		else:
			indent = extra_indent
		return indent + msg.replace("\n", "\n" + indent).rstrip(" ")

class _LogFileFormatter(logging.Formatter):
	BASE_FORMAT = "%(asctime)s %(message)s"

	def __init__(self, fmt=BASE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", style="%"):
		super().__init__(fmt, datefmt, style)

	PREFIXES = {
		logging.WARNING  : "WARNING: ",
		logging.ERROR    : "ERROR: ",
		logging.CRITICAL : "*** CRITICAL ***: ",
	}

	def format(self, record):
		prefix = self.PREFIXES.get(record.levelno)
		if prefix:
			# don't touch the record seen by the console handlers
			record = logging.makeLogRecord(record.__dict__)
			record.msg = prefix + str(record.msg)
		return super().format(record)

logger = logging.getLogger("bytesync")

def setup_logging(print_level:int = logging.INFO, log_file:Path|str|None = None, file_level:int = logging.DEBUG, tags_to_hide:set[_RecordTag]|None = None) -> logging.Logger:
	'''
	(Re)configure the handlers of the package logger.

	Args
		print_level    (int) : Log level for printing to console.
		log_file  (Path|str) : Path of a log file to append to. No file logging if `None`.
		file_level     (int) : Log level for the log file.
		tags_to_hide   (set) : Tagged records (header, footer, sync ops) that will not be printed to console.

	Returns
		The package logger.
	'''

	for handler in list(logger.handlers):
		logger.removeHandler(handler)
		handler.close()

	logger.setLevel(min(print_level, file_level) if log_file else print_level)
	logger.propagate = False

	handler_stdout = logging.StreamHandler(sys.stdout)
	handler_stderr = logging.StreamHandler(sys.stderr)

	handler_stdout.setLevel(print_level)
	handler_stderr.setLevel(max(print_level, logging.WARNING))

	handler_stdout.addFilter(_DebugInfoFilter())
	filter_tag = _TagFilter()
	for k in tags_to_hide or ():
		filter_tag[k] = True
	handler_stdout.addFilter(filter_tag)

	handler_stdout.setFormatter(_ConsoleFormatter())
	handler_stderr.setFormatter(_ConsoleFormatter())

	logger.addHandler(handler_stdout)
	logger.addHandler(handler_stderr)

	if log_file:
		handler_file = logging.FileHandler(log_file, encoding="utf-8")
		handler_file.setLevel(file_level)
		handler_file.setFormatter(_LogFileFormatter())
		handler_file.addFilter(_NonEmptyFilter())
		logger.addHandler(handler_file)

	return logger

if not logger.handlers:
	setup_logging()
