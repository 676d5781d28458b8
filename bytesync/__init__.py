# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

from .core import synchronize, process_directory
from .results import SyncResults
from .service import StorageSyncService
from .config import SyncConfiguration, Settings, load_settings
from .filter import NamePattern, MatcherSet, should_exclude
from .scanner import DirectoryEntry, EntryKind, list_files, list_directories
from .errors import ConfigurationError, ValidationError, FilesystemError, StateError

__all__ = [
	"synchronize",
	"process_directory",
	"SyncResults",
	"StorageSyncService",
	"SyncConfiguration",
	"Settings",
	"load_settings",
	"NamePattern",
	"MatcherSet",
	"should_exclude",
	"DirectoryEntry",
	"EntryKind",
	"list_files",
	"list_directories",
	"ConfigurationError",
	"ValidationError",
	"FilesystemError",
	"StateError",
]
