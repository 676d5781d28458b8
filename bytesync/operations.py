# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import os
import stat
import shutil
import tempfile
from pathlib import Path

from .scanner import DirectoryEntry

def _copy(src:DirectoryEntry, dst:Path) -> None:
	'''Copy the file `src` to `dst`, keeping its modification time and attributes. An existing `dst` file is overwritten, even if read-only.'''

	if dst.exists() and not dst.is_file():
		raise IsADirectoryError(21, f"Cannot copy {src.path}, dst is not a file", str(dst))

	# fresh temp file next to dst, never an existing entry
	fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tempcopy", dir=dst.parent)
	os.close(fd)
	dst_tmp = Path(tmp_name)
	try:
		# Copy into a temp file, with metadata
		shutil.copy2(src.path, dst_tmp)
		# replace the temp file
		_replace(dst_tmp, dst)
	finally:
		if os.path.lexists(dst_tmp):
			_make_writable(dst_tmp)
			dst_tmp.unlink()

	_set_attributes(dst, src)

def _replace(src:Path, dst:Path) -> None:
	'''Move file from `src` to `dst`. Existing files will be overwritten, even if read-only.'''

	if os.path.lexists(dst):
		_make_writable(dst)
	src.replace(dst)

def _make_writable(path:Path|str) -> None:
	'''Clear the read-only flag of `path`, if set. Symlinks are left alone.'''

	st = os.lstat(path)
	if stat.S_ISLNK(st.st_mode):
		return
	if not (st.st_mode & stat.S_IWUSR):
		os.chmod(path, stat.S_IMODE(st.st_mode) | stat.S_IWUSR)

def _set_attributes(path:Path, src:DirectoryEntry) -> None:
	'''Apply the attribute flags of `src` to `path`.'''

	if os.name == "nt":
		import ctypes
		# FILE_ATTRIBUTE_NORMAL is only valid on its own
		attrs = src.attributes or stat.FILE_ATTRIBUTE_NORMAL
		if not ctypes.windll.kernel32.SetFileAttributesW(str(path), attrs):
			raise ctypes.WinError()
	else:
		os.chmod(path, src.attributes)

def _create_dir(path:Path) -> None:
	path.mkdir(parents=True, exist_ok=True)

def _delete_file(path:Path) -> None:
	_make_writable(path)
	path.unlink()

def _delete_tree(path:Path) -> None:
	'''Delete the directory `path` and everything in it. Read-only flags are cleared first, since read-only entries cannot otherwise be removed.'''

	_make_writable(path)
	for dir, dirnames, filenames in os.walk(path, onerror=_raise):
		for name in dirnames + filenames:
			_make_writable(os.path.join(dir, name))
	shutil.rmtree(path)

def _raise(e:OSError) -> None:
	raise e
