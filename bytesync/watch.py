# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import threading
from typing import TYPE_CHECKING

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileSystemEvent

from .log import logger

if TYPE_CHECKING:
	from .service import StorageSyncService

class _SourceWatcher(FileSystemEventHandler):
	'''Requests a sync pass from a `StorageSyncService` whenever something changes under its source directory.'''

	# events caused by reading files, including the reads made by a sync pass
	IGNORED_EVENTS = {"opened", "closed_no_write"}

	def __init__(self, service: "StorageSyncService", delay:float = 1.0):
		self.service  = service
		self.delay    = delay
		self.observer : Observer|None = None
		self._timer   : threading.Timer|None = None
		self._lock    = threading.Lock()

	def start(self) -> None:
		src = self.service.config.src
		logger.info(f"Watching: {src}")
		self.observer = Observer()
		self.observer.schedule(self, str(src), recursive=True)
		self.observer.daemon = True
		self.observer.start()

	def stop(self) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
				self._timer = None
		if self.observer is not None:
			self.observer.stop()
			if threading.current_thread() is not self.observer:
				self.observer.join()
			self.observer = None

	def on_any_event(self, event: FileSystemEvent) -> None:
		if event.event_type in _SourceWatcher.IGNORED_EVENTS:
			return
		logger.debug(f"{type(event).__name__} {event.src_path}")
		# wait for a burst of changes to settle before asking for a pass
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
			self._timer = threading.Timer(self.delay, self._fire)
			self._timer.daemon = True
			self._timer.start()

	def _fire(self) -> None:
		with self._lock:
			self._timer = None
		if self.service.run_pass() is None:
			logger.debug("Change-triggered sync pass skipped.")
