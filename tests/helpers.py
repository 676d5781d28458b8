# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import os
import stat
from pathlib import Path

from bytesync import SyncConfiguration, MatcherSet

class TempLoggingLevel:
	def __init__(self, logger, level):
		self.logger = logger
		self.level = level
	def __enter__(self):
		self.old_level = self.logger.level
		self.logger.setLevel(self.level)
	def __exit__(self, exc_type, exc_val, exc_tb):
		self.logger.setLevel(self.old_level)

def create_file_structure(root:Path, structure:dict):
	'''
	Recursively creates a directory structure with files.

	Values in `structure` may be: a dict (a subdirectory), None (an empty file), a str (file content), an int or float (an empty file with that mtime), or a tuple of (content, mtime).
	'''
	root.mkdir(parents=True, exist_ok=True)
	for name, content in structure.items():
		file_path = root / name
		if isinstance(content, dict):
			# create dir
			create_file_structure(file_path, content)
		elif type(content) in (float, int):
			file_path.touch()
			mtime = float(content)
			os.utime(file_path, (mtime, mtime))
		elif isinstance(content, (tuple, list)):
			# Create file with modtime and content
			file_path.write_text(content[0] or "")
			mtime = float(content[1])
			os.utime(file_path, (mtime, mtime))
		elif content is None:
			# Create an empty file
			file_path.touch()
		else:
			# Create a file with content
			file_path.write_text(content)

def tree(root:Path) -> dict:
	'''Read a directory structure back into a dict of the form used by `create_file_structure()`, with file contents as values.'''
	result = {}
	for entry in sorted(os.scandir(root), key=lambda x: x.name):
		if entry.is_dir(follow_symlinks=False):
			result[entry.name] = tree(Path(entry.path))
		else:
			result[entry.name] = Path(entry.path).read_text()
	return result

def make_readonly(path:Path):
	mode = stat.S_IMODE(os.stat(path).st_mode)
	os.chmod(path, mode & ~(stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH))

def make_writable_tree(root:Path):
	'''Undo `make_readonly()` everywhere under `root`, so that temp dirs can be cleaned up.'''
	if not root.exists():
		return
	for dir, dirnames, filenames in os.walk(root):
		for name in dirnames + filenames:
			p = os.path.join(dir, name)
			if not os.path.islink(p):
				os.chmod(p, stat.S_IMODE(os.stat(p).st_mode) | stat.S_IWUSR)

def make_config(src:Path, dst:Path, **kwargs) -> SyncConfiguration:
	'''Build a `SyncConfiguration`, compiling any list of filespecs passed for a matcher field.'''
	for key, val in kwargs.items():
		if isinstance(val, list):
			kwargs[key] = MatcherSet.from_filespecs(val)
	return SyncConfiguration(src=src, dst=dst, **kwargs)
