# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import os
import json
import math
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .filter import MatcherSet
from .errors import ConfigurationError, ValidationError

@dataclass(frozen=True)
class SyncConfiguration:
	'''Read-only settings shared by every step of a sync pass.'''

	src                  : Path
	dst                  : Path
	exclude_hidden       : bool = False
	delete_from_dest     : bool = False

	exclude_files        : MatcherSet|None = None
	include_files        : MatcherSet|None = None
	exclude_dirs         : MatcherSet|None = None
	include_dirs         : MatcherSet|None = None
	delete_exclude_files : MatcherSet|None = None
	delete_exclude_dirs  : MatcherSet|None = None

	@property
	def is_filtered(self) -> bool:
		'''Whether any source-side filtering rule is configured.'''

		return self.exclude_hidden or any(m is not None for m in (
			self.exclude_files,
			self.include_files,
			self.exclude_dirs,
			self.include_dirs,
		))

	def validate(self) -> None:
		'''
		Check the configuration before the first pass. Settings are checked before the filesystem is touched.

		Raises
			ConfigurationError : contradictory or incomplete settings
			ValidationError    : the root directories do not exist or contain each other
		'''

		if self.include_files is not None and self.exclude_files is not None:
			raise ConfigurationError("'IncludeFiles' and 'ExcludeFiles' cannot both be set.")
		if self.include_dirs is not None and self.exclude_dirs is not None:
			raise ConfigurationError("'IncludeDirs' and 'ExcludeDirs' cannot both be set.")
		if not str(self.src).strip():
			raise ConfigurationError("Source directory cannot be an empty path.")
		if not str(self.dst).strip():
			raise ConfigurationError("Destination directory cannot be an empty path.")
		if (self.delete_exclude_files is not None or self.delete_exclude_dirs is not None) and not self.delete_from_dest:
			raise ConfigurationError("'DeleteExcludeFiles' and 'DeleteExcludeDirs' require 'DeleteFromDest'.")

		src = Path(os.path.abspath(self.src))
		dst = Path(os.path.abspath(self.dst))
		if src == dst:
			raise ValidationError(f"Source and destination cannot be the same directory: {src}")
		if dst.is_relative_to(src) or src.is_relative_to(dst):
			raise ValidationError(f"Source directory {src} and destination directory {dst} cannot contain each other.")

		if not self.src.exists():
			raise ValidationError(f"Source directory not found: {self.src}")
		if not self.src.is_dir():
			raise ValidationError(f"Source is not a directory: {self.src}")
		if self.dst.exists() and not self.dst.is_dir():
			raise ValidationError(f"Destination is not a directory: {self.dst}")

		# resolve symlinks too, now that the paths are known to exist
		src = self.src.resolve()
		dst = self.dst.resolve()
		if src == dst or dst.is_relative_to(src) or src.is_relative_to(dst):
			raise ValidationError(f"Source directory {src} and destination directory {dst} cannot contain each other.")

_BOOL_STRINGS = {
	"1": True, "true": True, "yes": True, "on": True,
	"0": False, "false": False, "no": False, "off": False,
}

@dataclass
class Settings:
	'''
	Raw settings as they appear in a settings file, the environment, or the command line.

	Keys use the names of the settings file (e.g. "DirSrc", "DeleteFromDest").
	'''

	SECTION    = "StorageSync"
	ENV_PREFIX = "BYTESYNC_"

	SyncInterval       : float = 60.0
	DirSrc             : str = ""
	DirDest            : str = ""
	ExcludeHidden      : bool = False
	DeleteFromDest     : bool = False
	ExcludeFiles       : list[str]|None = None
	IncludeFiles       : list[str]|None = None
	ExcludeDirs        : list[str]|None = None
	IncludeDirs        : list[str]|None = None
	DeleteExcludeFiles : list[str]|None = None
	DeleteExcludeDirs  : list[str]|None = None

	_sources           : list[str] = field(default_factory=list, repr=False)

	@classmethod
	def keys(cls) -> list[str]:
		return [f.name for f in fields(cls) if not f.name.startswith("_")]

	def update(self, values:Mapping[str, Any], source:str) -> "Settings":
		'''Set keys from `values`, converting and checking their types. `source` is used in error messages.'''

		known = {k.lower(): k for k in Settings.keys()}
		for raw_key, raw_val in values.items():
			key = known.get(str(raw_key).lower())
			if key is None:
				raise ConfigurationError(f"Unknown setting '{raw_key}' in {source}.")
			setattr(self, key, Settings._convert(key, raw_val, source))
		self._sources.append(source)
		return self

	@staticmethod
	def _convert(key:str, val:Any, source:str) -> Any:
		'''
		Convert a raw value to the type expected for `key`.

		>>> Settings._convert("SyncInterval", "2.5", "test")
		2.5
		>>> Settings._convert("DeleteFromDest", "yes", "test")
		True
		>>> Settings._convert("ExcludeFiles", "*.tmp; *.bak", "test")
		['*.tmp', '*.bak']
		'''

		if key == "SyncInterval":
			if isinstance(val, bool):
				raise ConfigurationError(f"Bad type for '{key}' in {source} (expected number): {val!r}")
			try:
				interval = float(val)
			except (TypeError, ValueError) as e:
				raise ConfigurationError(f"Bad type for '{key}' in {source} (expected number): {val!r}") from e
			if not math.isfinite(interval):
				raise ConfigurationError(f"Bad value for '{key}' in {source} (expected finite number): {val!r}")
			return interval
		elif key in ("DirSrc", "DirDest"):
			if not isinstance(val, str|os.PathLike):
				raise ConfigurationError(f"Bad type for '{key}' in {source} (expected path): {val!r}")
			return os.fspath(val)
		elif key in ("ExcludeHidden", "DeleteFromDest"):
			if isinstance(val, bool):
				return val
			if isinstance(val, str) and val.strip().lower() in _BOOL_STRINGS:
				return _BOOL_STRINGS[val.strip().lower()]
			raise ConfigurationError(f"Bad type for '{key}' in {source} (expected bool): {val!r}")
		else:
			if val is None:
				return None
			if isinstance(val, str):
				val = [s for s in val.split(";") if s.strip()]
			if not isinstance(val, list|tuple) or not all(isinstance(s, str) for s in val):
				raise ConfigurationError(f"Bad type for '{key}' in {source} (expected list of filespecs): {val!r}")
			return [s.strip() for s in val]

	def to_configuration(self) -> SyncConfiguration:
		'''Compile filespecs into matchers and build the `SyncConfiguration` for a sync pass.'''

		if not self.DirSrc.strip():
			raise ConfigurationError("Source directory cannot be an empty path.")
		if not self.DirDest.strip():
			raise ConfigurationError("Destination directory cannot be an empty path.")

		return SyncConfiguration(
			src                  = _expand(self.DirSrc),
			dst                  = _expand(self.DirDest),
			exclude_hidden       = self.ExcludeHidden,
			delete_from_dest     = self.DeleteFromDest,
			exclude_files        = MatcherSet.from_filespecs(self.ExcludeFiles),
			include_files        = MatcherSet.from_filespecs(self.IncludeFiles),
			exclude_dirs         = MatcherSet.from_filespecs(self.ExcludeDirs),
			include_dirs         = MatcherSet.from_filespecs(self.IncludeDirs),
			delete_exclude_files = MatcherSet.from_filespecs(self.DeleteExcludeFiles),
			delete_exclude_dirs  = MatcherSet.from_filespecs(self.DeleteExcludeDirs),
		)

def _expand(path:str) -> Path:
	path = os.path.expanduser(path)
	path = os.path.expandvars(path)
	return Path(os.path.abspath(path))

def _read_settings_file(path:Path|str) -> dict[str, Any]:
	'''Read a JSON settings file. Keys may be at the top level or inside a "StorageSync" section.'''

	try:
		with open(path, encoding="utf-8") as f:
			data = json.load(f)
	except FileNotFoundError as e:
		raise ConfigurationError(f"Settings file not found: {path}") from e
	except json.JSONDecodeError as e:
		raise ConfigurationError(f"Settings file is not valid JSON: {path}: {e}") from e

	if not isinstance(data, dict):
		raise ConfigurationError(f"Settings file must contain a JSON object: {path}")
	section = next((v for k, v in data.items() if k.lower() == Settings.SECTION.lower()), None)
	if section is not None:
		if not isinstance(section, dict):
			raise ConfigurationError(f"'{Settings.SECTION}' must be a JSON object: {path}")
		return section
	return data

def _read_environ(environ:Mapping[str, str]) -> dict[str, str]:
	values = {}
	for key in Settings.keys():
		env_key = Settings.ENV_PREFIX + key.upper()
		if env_key in environ:
			values[key] = environ[env_key]
	return values

def load_settings(path:Path|str|None = None, *, environ:Mapping[str, str]|None = None, overrides:Mapping[str, Any]|None = None) -> Settings:
	'''
	Collect settings from, in increasing order of precedence: a JSON settings file, `BYTESYNC_*` environment variables, and explicit overrides (usually from the command line).

	Args
		path      (Path|str) : The JSON settings file. Skipped if `None`.
		environ    (Mapping) : Environment variables to read. (Defaults to `os.environ`.)
		overrides  (Mapping) : Settings that take priority over everything else. `None` values are skipped.

	Returns
		A `Settings` object.
	'''

	settings = Settings()
	if path is not None:
		settings.update(_read_settings_file(path), source=str(path))
	settings.update(_read_environ(os.environ if environ is None else environ), source="environment")
	if overrides:
		settings.update({k: v for k, v in overrides.items() if v is not None}, source="command line")
	return settings
