# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

from enum import Enum
from typing import Iterator

class SyncResults:
	'''
	Counters tallied during a single sync pass.

	>>> r = SyncResults()
	>>> r.files_copied += 2
	>>> print(r)
	Synchronization summary:
	       Files Copied: 2
	   Files Up To Date: 0
	      Files Deleted: 0
	      Files Ignored: 0
	Directories Created: 0
	Directories Deleted: 0
	Directories Ignored: 0
	'''

	class Status(Enum):
		UNKNOWN   = -1
		COMPLETED = 0
		FAILED    = 1

	# (label, attribute) in the order they are summarized
	FIELDS = (
		("Files Copied",        "files_copied"),
		("Files Up To Date",    "files_up_to_date"),
		("Files Deleted",       "files_deleted"),
		("Files Ignored",       "files_ignored"),
		("Directories Created", "directories_created"),
		("Directories Deleted", "directories_deleted"),
		("Directories Ignored", "directories_ignored"),
	)

	def __init__(self):
		self.status              : SyncResults.Status = SyncResults.Status.UNKNOWN
		self.error               : BaseException|None = None # the error that halted the pass
		self.files_copied        : int = 0
		self.files_up_to_date    : int = 0
		self.files_deleted       : int = 0
		self.files_ignored       : int = 0
		self.directories_created : int = 0
		self.directories_deleted : int = 0
		self.directories_ignored : int = 0

	@property
	def completed(self) -> bool:
		return self.status == SyncResults.Status.COMPLETED

	@property
	def changes(self) -> int:
		'''Number of filesystem changes made in `dst`.'''

		return self.files_copied + self.files_deleted + self.directories_created + self.directories_deleted

	def counts(self) -> dict[str, int]:
		return {attr: getattr(self, attr) for _, attr in SyncResults.FIELDS}

	def summary(self) -> Iterator[str]:
		'''Yield the lines of a human-readable summary, aligned on the colons.'''

		lines = [f"{label}: {getattr(self, attr)}" for label, attr in SyncResults.FIELDS]
		key_length = max(line.find(":") for line in lines)
		yield "Synchronization summary:"
		for line in lines:
			yield f"{line:>{len(line) + key_length - line.find(':')}}"

	def __str__(self):
		return "\n".join(self.summary())

	def __repr__(self):
		counts = ", ".join(f"{k}={v}" for k, v in self.counts().items())
		return f"SyncResults(status={self.status.name}, {counts})"
