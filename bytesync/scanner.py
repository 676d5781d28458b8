# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import os
import stat
from enum import Enum
from pathlib import Path
from dataclasses import dataclass

from .config import SyncConfiguration
from .filter import should_exclude
from .results import SyncResults
from .errors import FilesystemError
from .log import logger, _exc_summary

# Windows file attribute bits that are compared and copied between src and dst
_WIN_ATTRIBUTE_MASK = (
	stat.FILE_ATTRIBUTE_READONLY
	| stat.FILE_ATTRIBUTE_HIDDEN
	| stat.FILE_ATTRIBUTE_SYSTEM
	| stat.FILE_ATTRIBUTE_ARCHIVE
)

class EntryKind(Enum):
	FILE = 1
	DIRECTORY = 2

@dataclass(frozen=True)
class DirectoryEntry:
	'''A snapshot of one file or directory, taken when its parent directory was scanned.'''

	name       : str
	path       : Path
	kind       : EntryKind
	size       : int
	mtime_ns   : int
	attributes : int  # Windows file attributes, or permission bits elsewhere
	hidden     : bool
	readonly   : bool

	@property
	def is_dir(self) -> bool:
		return self.kind == EntryKind.DIRECTORY

	@classmethod
	def from_stat(cls, name:str, path:Path, kind:EntryKind, st:os.stat_result) -> "DirectoryEntry":
		if os.name == "nt":
			win_attrs  = st.st_file_attributes
			attributes = win_attrs & _WIN_ATTRIBUTE_MASK
			hidden     = bool(win_attrs & stat.FILE_ATTRIBUTE_HIDDEN)
			readonly   = bool(win_attrs & stat.FILE_ATTRIBUTE_READONLY)
		else:
			attributes = stat.S_IMODE(st.st_mode)
			hidden     = name.startswith(".")
			readonly   = not (st.st_mode & stat.S_IWUSR)
		return cls(
			name       = name,
			path       = path,
			kind       = kind,
			size       = st.st_size if kind == EntryKind.FILE else 0,
			mtime_ns   = st.st_mtime_ns,
			attributes = attributes,
			hidden     = hidden,
			readonly   = readonly,
		)

	def matches(self, other:"DirectoryEntry") -> bool:
		'''Whether `other` has the same size, modification time, and attributes as this entry.'''

		return (
			self.size == other.size
			and self.mtime_ns == other.mtime_ns
			and self.attributes == other.attributes
		)

	def __str__(self):
		return str(self.path)

def _scan(dir:Path, kind:EntryKind, exhaustive:bool = False) -> list[DirectoryEntry]:
	'''
	List the immediate children of `dir` that are of type `kind`, sorted by name.

	If `exhaustive`, every entry that is not a real directory is listed as a file, including dangling symlinks, symlinks to directories, and special files. Those are described by their own `lstat()`, so they can be unlinked.
	'''

	entries : list[DirectoryEntry] = []
	try:
		with os.scandir(dir) as it:
			for entry in it:
				try:
					# Symlinks to directories are not descended into.
					is_dir = entry.is_dir(follow_symlinks=False)
					if kind == EntryKind.DIRECTORY:
						if not is_dir:
							continue
						st = entry.stat(follow_symlinks=False)
					elif is_dir:
						continue
					elif entry.is_file(follow_symlinks=True):
						st = entry.stat(follow_symlinks=True)
					elif exhaustive:
						st = entry.stat(follow_symlinks=False)
					else:
						# Non-standard files (sockets, pipes, devices) and dangling symlinks are skipped.
						logger.debug(f"Skipping: {entry.path}")
						continue
				except OSError as e:
					logger.warning(_exc_summary(e))
					continue
				entries.append(DirectoryEntry.from_stat(entry.name, Path(entry.path), kind, st))
	except OSError as e:
		raise FilesystemError("Cannot list directory", str(dir)) from e

	entries.sort(key=lambda x: x.name)
	return entries

def _select(entries:list[DirectoryEntry], config:SyncConfiguration|None, kind:EntryKind) -> tuple[list[DirectoryEntry], int]:
	'''Drop entries rejected by the filter settings in `config`. Returns the remaining entries and the number dropped.'''

	if config is None or not config.is_filtered:
		return entries, 0

	if kind == EntryKind.FILE:
		exclude, include = config.exclude_files, config.include_files
	else:
		exclude, include = config.exclude_dirs, config.include_dirs

	selected = []
	ignored = 0
	for entry in entries:
		if (config.exclude_hidden and entry.hidden) or should_exclude(exclude, include, entry.name):
			logger.debug(f"Ignoring: {entry.path}")
			ignored += 1
		else:
			selected.append(entry)
	return selected, ignored

def list_files(dir:Path, config:SyncConfiguration|None, results:SyncResults|None = None) -> tuple[list[DirectoryEntry], int]:
	'''
	List the files directly inside `dir`.

	Args
		dir               (Path) : The directory to list.
		config (SyncConfiguration) : Filter settings. If `None`, every entry that is not a directory is returned, symlinks included (used for the `dst` side).
		results    (SyncResults) : If given, `files_ignored` is incremented for every file filtered out.

	Returns
		A tuple of the selected files and the number of files filtered out.

	Raises
		FilesystemError if `dir` cannot be listed.
	'''

	selected, ignored = _select(_scan(dir, EntryKind.FILE, exhaustive=config is None), config, EntryKind.FILE)
	if results is not None:
		results.files_ignored += ignored
	return selected, ignored

def list_directories(dir:Path, config:SyncConfiguration|None, results:SyncResults|None = None) -> tuple[list[DirectoryEntry], int]:
	'''Like `list_files()`, but for subdirectories. Filtered out subdirectories are tallied in `directories_ignored`.'''

	selected, ignored = _select(_scan(dir, EntryKind.DIRECTORY), config, EntryKind.DIRECTORY)
	if results is not None:
		results.directories_ignored += ignored
	return selected, ignored
