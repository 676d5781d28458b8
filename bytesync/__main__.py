# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import sys
import logging
import argparse
from argparse import BooleanOptionalAction as BOA

from .config import load_settings
from .core import synchronize
from .service import StorageSyncService
from .errors import ConfigurationError, ValidationError
from .log import logger, setup_logging, TRACE, _RecordTag

class _ArgParser:
	'''Argument parser for when this package is run from the command line.'''

	parser = argparse.ArgumentParser(
		prog="bytesync",
		description="Periodically copy new and updated files from one directory tree to another.",
		epilog="Settings given on the command line take priority over BYTESYNC_* environment variables, which take priority over the settings file.",
		fromfile_prefix_chars="!",
	)

	parser.add_argument("src", nargs="?", default=None, help="The root directory to copy files from. (Setting: DirSrc)")
	parser.add_argument("dst", nargs="?", default=None, help="The root directory to copy files to. It will be created if it does not exist. (Setting: DirDest)")

	parser.add_argument("-c", "--config", metavar="path", type=str, default=None, help="A JSON settings file. Keys may be at the top level or inside a \"StorageSync\" object.")
	parser.add_argument("-i", "--interval", metavar="seconds", type=float, default=None, help="Seconds between the end of one sync pass and the start of the next. (Setting: SyncInterval, defaults to 60)")

	parser.add_argument("-ih", "--exclude-hidden", action=BOA, default=None, help="Enable/disable skipping hidden files and directories in 'src'. (Setting: ExcludeHidden)")
	parser.add_argument("-d", "--delete", action=BOA, default=None, help="Enable/disable deletion of files and directories in 'dst' that are not in 'src'. (Setting: DeleteFromDest)")

	file_filter = parser.add_mutually_exclusive_group()
	file_filter.add_argument("-xf", "--exclude-files", metavar="filespec", nargs="+", type=str, default=None, help="Do not copy files whose names match any of these filespecs, e.g. \"*.tmp\". (Setting: ExcludeFiles)")
	file_filter.add_argument("-if", "--include-files", metavar="filespec", nargs="+", type=str, default=None, help="Only copy files whose names match one of these filespecs. (Setting: IncludeFiles)")

	dir_filter = parser.add_mutually_exclusive_group()
	dir_filter.add_argument("-xd", "--exclude-dirs", metavar="filespec", nargs="+", type=str, default=None, help="Do not sync directories whose names match any of these filespecs. (Setting: ExcludeDirs)")
	dir_filter.add_argument("-id", "--include-dirs", metavar="filespec", nargs="+", type=str, default=None, help="Only sync directories whose names match one of these filespecs. (Setting: IncludeDirs)")

	parser.add_argument("-ndf", "--delete-exclude-files", metavar="filespec", nargs="+", type=str, default=None, help="Never delete files in 'dst' whose names match these filespecs. Requires --delete. (Setting: DeleteExcludeFiles)")
	parser.add_argument("-ndd", "--delete-exclude-dirs", metavar="filespec", nargs="+", type=str, default=None, help="Never delete directories in 'dst' whose names match these filespecs. Requires --delete. (Setting: DeleteExcludeDirs)")

	mode = parser.add_mutually_exclusive_group()
	mode.add_argument("--once", action="store_true", default=False, help="Run a single sync pass and exit.")
	mode.add_argument("-w", "--watch", action="store_true", default=False, help="Also run a sync pass whenever something changes under 'src'.")

	parser.add_argument("--log", metavar="path", type=str, default=None, help="The path of a log file to append to. If this flag is absent, then no logging to file will be performed.")
	parser.add_argument("--log-level", type=str, default=None, help="Log level for logging to file. (Defaults to TRACE)")

	print_level = parser.add_mutually_exclusive_group()
	print_level.add_argument("-q", action="count", default=None, help="Shorthand for --print-level WARNING (-q) and --print-level CRITICAL (-qq).")
	print_level.add_argument("-p", "--print-level", type=str, default=None, help="Log level for printing to console. (Defaults to INFO)")
	print_level.add_argument("--trace", action="store_true", default=None, help="Shorthand for --print-level TRACE, which prints every file and directory action.")

	parser.add_argument("-nh", "--no-header", action="store_true", default=None, help="Skip logging the root paths when starting.")
	parser.add_argument("-nf", "--no-footer", action="store_true", default=None, help="Skip logging the summary after each pass.")

	# option name -> setting name
	SETTINGS = {
		"src"                  : "DirSrc",
		"dst"                  : "DirDest",
		"interval"             : "SyncInterval",
		"exclude_hidden"       : "ExcludeHidden",
		"delete"               : "DeleteFromDest",
		"exclude_files"        : "ExcludeFiles",
		"include_files"        : "IncludeFiles",
		"exclude_dirs"         : "ExcludeDirs",
		"include_dirs"         : "IncludeDirs",
		"delete_exclude_files" : "DeleteExcludeFiles",
		"delete_exclude_dirs"  : "DeleteExcludeDirs",
	}

	LOG_LEVELS = {"TRACE": TRACE, "DEBUG": logging.DEBUG, "INFO":logging.INFO, "WARNING":logging.WARNING, "WARN":logging.WARNING, "ERROR":logging.ERROR, "ERR":logging.ERROR, "CRITICAL":logging.CRITICAL, "CRIT":logging.CRITICAL}

	@staticmethod
	def _level(name:str) -> int:
		try:
			return _ArgParser.LOG_LEVELS[name.upper()]
		except KeyError:
			_ArgParser.parser.error(f"unknown log level: {name}")

	@staticmethod
	def parse(args:list[str]) -> argparse.Namespace:
		'''Convert flags specific to the command line into settings and logging options.'''

		parsed_args = _ArgParser.parser.parse_args(args)

		if parsed_args.q:
			if parsed_args.q == 1:
				parsed_args.print_level = logging.WARNING
			else:
				parsed_args.print_level = logging.CRITICAL
		elif parsed_args.trace:
			parsed_args.print_level = TRACE
		elif parsed_args.print_level:
			parsed_args.print_level = _ArgParser._level(parsed_args.print_level)
		else:
			parsed_args.print_level = logging.INFO
		del parsed_args.q
		del parsed_args.trace

		if parsed_args.log_level:
			parsed_args.log_level = _ArgParser._level(parsed_args.log_level)
		else:
			parsed_args.log_level = TRACE

		parsed_args.overrides = {
			setting: getattr(parsed_args, option)
			for option, setting in _ArgParser.SETTINGS.items()
			if getattr(parsed_args, option) is not None
		}
		for option in _ArgParser.SETTINGS:
			delattr(parsed_args, option)

		parsed_args.tags_to_hide = set()
		if parsed_args.no_header:
			parsed_args.tags_to_hide.add(_RecordTag.HEADER)
		if parsed_args.no_footer:
			parsed_args.tags_to_hide.add(_RecordTag.FOOTER)
		del parsed_args.no_header
		del parsed_args.no_footer

		return parsed_args

def main(args:list[str]) -> None:
	'''Load settings and run the sync service until interrupted, or run a single pass with --once.'''

	try:
		parsed_args = _ArgParser.parse(args)

		setup_logging(
			print_level  = parsed_args.print_level,
			log_file     = parsed_args.log,
			file_level   = parsed_args.log_level,
			tags_to_hide = parsed_args.tags_to_hide,
		)
		logger.debug(f"{parsed_args=}")

		try:
			settings = load_settings(parsed_args.config, overrides=parsed_args.overrides)
			config = settings.to_configuration()
			if parsed_args.once:
				config.validate()
		except (TypeError, ConfigurationError, ValidationError) as e:
			logger.critical(e)
			sys.exit(1)

		if parsed_args.once:
			results = synchronize(config)
			sys.exit(0 if results.completed else 1)

		service = StorageSyncService()
		try:
			service.start(settings.SyncInterval, config, watch=parsed_args.watch)
		except (TypeError, ConfigurationError, ValidationError) as e:
			logger.critical(e)
			sys.exit(1)

		logger.info("Press CTRL-C to quit.")
		try:
			while not service.wait(1):
				pass
		finally:
			service.stop()

		sys.exit(0)

	except KeyboardInterrupt:
		sys.exit(0)
	except Exception:
		logger.critical("An unexpected error occurred.", exc_info=True)
		sys.exit(1)

def cli() -> None:
	main(sys.argv[1:])

if __name__ == "__main__":
	cli()
