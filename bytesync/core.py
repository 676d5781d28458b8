# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

from pathlib import Path

from .config import SyncConfiguration
from .filter import should_exclude
from .scanner import list_files, list_directories
from .operations import _copy, _create_dir, _delete_file, _delete_tree
from .results import SyncResults
from .errors import FilesystemError
from .log import logger, TRACE, _RecordTag, _exc_summary

SYNC_OP = _RecordTag.SYNC_OP.dict()
FOOTER  = _RecordTag.FOOTER.dict()

def synchronize(config:SyncConfiguration) -> SyncResults:
	'''
	Run one sync pass, making `config.dst` match `config.src`.

	`synchronize()` does not raise `FilesystemError`. If the pass is halted by one, the error will be available in the returned `SyncResults` object, whose status will be `FAILED`. Files already copied or deleted before the failure stay that way; the next pass picks up from there.

	Args
		config (SyncConfiguration) : Settings for this pass. Should already be validated.

	Returns
		A `SyncResults` object with the counts for this pass.
	'''

	results = SyncResults()
	try:
		process_directory(config.src, config.dst, config, results)
		results.status = SyncResults.Status.COMPLETED
	except FilesystemError as e:
		results.status = SyncResults.Status.FAILED
		results.error = e
		cause = f" {_exc_summary(e.__cause__)}" if e.__cause__ else ""
		logger.error(f"{e}.{cause}")
	finally:
		for line in results.summary():
			logger.info(line, extra=FOOTER)
	return results

def process_directory(src_dir:Path, dst_dir:Path, config:SyncConfiguration, results:SyncResults) -> None:
	'''
	Recursively sync one source directory into one destination directory.

	Files in this directory are handled before any subdirectory, and nothing is deleted until every copy at this level has succeeded. The first failure anywhere in the tree halts the whole pass.

	Args
		src_dir            (Path) : The source directory.
		dst_dir            (Path) : The destination directory. Created if it does not exist.
		config (SyncConfiguration) : Filter and deletion settings.
		results     (SyncResults) : Counters, updated in place.

	Raises
		FilesystemError on the first failure to list, create, copy, or delete an entry.
	'''

	# create destination directory if it doesn't exist
	if not dst_dir.is_dir():
		logger.log(TRACE, f"Creating directory: {dst_dir}", extra=SYNC_OP)
		try:
			_create_dir(dst_dir)
		except OSError as e:
			raise FilesystemError("Failed to create directory", str(dst_dir)) from e
		results.directories_created += 1

	# selected files from src, all files from dst
	src_files, _ = list_files(src_dir, config, results)
	dst_files, _ = list_files(dst_dir, None)

	src_by_name = {f.name: f for f in src_files}
	dst_by_name = {f.name: f for f in dst_files}

	for src_file in src_files:
		dst_file = dst_by_name.get(src_file.name)
		if dst_file is not None and src_file.matches(dst_file):
			results.files_up_to_date += 1
			continue

		dst_path = dst_dir / src_file.name
		logger.log(TRACE, f"Copying: {src_file.path} -> {dst_path}", extra=SYNC_OP)
		try:
			_copy(src_file, dst_path)
		except OSError as e:
			raise FilesystemError(f"Failed to copy file from {src_file.path}", str(dst_path)) from e
		results.files_copied += 1

	if config.delete_from_dest:
		for dst_file in dst_files:
			if dst_file.name in src_by_name:
				continue
			if should_exclude(config.delete_exclude_files, None, dst_file.name):
				continue
			logger.log(TRACE, f"Deleting: {dst_file.path}", extra=SYNC_OP)
			try:
				_delete_file(dst_file.path)
			except OSError as e:
				raise FilesystemError("Failed to delete file", str(dst_file.path)) from e
			results.files_deleted += 1

	# selected subdirectories from src, all subdirectories from dst
	src_dirs, _ = list_directories(src_dir, config, results)
	dst_dirs, _ = list_directories(dst_dir, None)

	src_dir_names = {d.name for d in src_dirs}
	for src_subdir in src_dirs:
		process_directory(src_subdir.path, dst_dir / src_subdir.name, config, results)

	if config.delete_from_dest:
		for dst_subdir in dst_dirs:
			if dst_subdir.name in src_dir_names:
				continue
			if should_exclude(config.delete_exclude_dirs, None, dst_subdir.name):
				continue
			logger.log(TRACE, f"Deleting directory: {dst_subdir.path}", extra=SYNC_OP)
			try:
				_delete_tree(dst_subdir.path)
			except OSError as e:
				raise FilesystemError("Failed to delete directory", str(dst_subdir.path)) from e
			results.directories_deleted += 1
