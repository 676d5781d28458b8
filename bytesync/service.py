# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import math
import threading
from enum import Enum

from .config import SyncConfiguration
from .core import synchronize
from .results import SyncResults
from .watch import _SourceWatcher
from .errors import ConfigurationError, StateError
from .log import logger, _RecordTag

HEADER = _RecordTag.HEADER.dict()

class StorageSyncService:
	'''
	Runs sync passes in the background on a fixed interval.

	The first pass starts as soon as the service is started. The interval is measured from the end of one pass to the start of the next, since the timer is suspended while a pass runs. At most one pass runs at a time: a pass requested while another is running (from the timer, the source watcher, or a direct call to `run_pass()`) is dropped, not queued.

	Example
		service = StorageSyncService()
		service.start(60, settings.to_configuration())
		...
		service.stop()
	'''

	class _ServiceState(Enum):
		READY   = 0
		RUNNING = 1
		STOPPED = 2

	def __init__(self):
		self._state      : StorageSyncService._ServiceState = StorageSyncService._ServiceState.READY
		self._config     : SyncConfiguration|None = None
		self._interval   : float = 0.0
		self._timer      : threading.Timer|None = None
		self._watcher    : _SourceWatcher|None = None
		self._state_lock : threading.Lock = threading.Lock() # guards _state and _timer
		self._pass_lock  : threading.Lock = threading.Lock() # held while a pass runs
		self._stopped    : threading.Event = threading.Event()

		self.last_results : SyncResults|None = None
		self.pass_count   : int = 0

	@property
	def config(self) -> SyncConfiguration|None:
		return self._config

	@property
	def interval(self) -> float:
		return self._interval

	@property
	def is_running(self) -> bool:
		return self._state == StorageSyncService._ServiceState.RUNNING

	def start(self, interval:float, config:SyncConfiguration, *, watch:bool = False, watch_delay:float = 1.0) -> None:
		'''
		Validate the configuration and begin running sync passes.

		Args
			interval        (float) : Seconds between the end of one pass and the start of the next. Must be positive.
			config (SyncConfiguration) : Settings for every pass.
			watch            (bool) : Whether to also run a pass when something changes under the source directory.
			watch_delay     (float) : Seconds to wait for a burst of source changes to settle before running a pass.

		Raises
			ConfigurationError, ValidationError : the settings are invalid. Nothing will be scheduled.
			StateError : the service was already started.
		'''

		if self._state != StorageSyncService._ServiceState.READY:
			raise StateError(f"Service cannot be started from state {self._state.name}.")
		if isinstance(interval, bool) or not isinstance(interval, int|float):
			raise ConfigurationError(f"Bad type for sync interval (expected number): {interval!r}")
		if not math.isfinite(interval) or interval <= 0:
			raise ConfigurationError(f"Sync interval must be a finite number greater than 0: {interval!r}")
		config.validate()

		logger.info("Background sync service is starting.")
		logger.info(f"Source root path: {config.src}", extra=HEADER)
		logger.info(f"Destination root path: {config.dst}", extra=HEADER)
		logger.info(f"Sync interval: {interval:g}s", extra=HEADER)

		self._config = config
		self._interval = float(interval)
		self._stopped.clear()
		with self._state_lock:
			self._state = StorageSyncService._ServiceState.RUNNING

		if watch:
			self._watcher = _SourceWatcher(self, delay=watch_delay)
			self._watcher.start()

		self._arm(0)

	def stop(self) -> None:
		'''Stop scheduling passes. A pass that is already running is not interrupted.'''

		with self._state_lock:
			if self._state != StorageSyncService._ServiceState.RUNNING:
				return
			self._state = StorageSyncService._ServiceState.STOPPED
			self._cancel_timer()

		logger.info("Background sync service is stopping.")
		if self._watcher is not None:
			self._watcher.stop()
			self._watcher = None
		self._stopped.set()

	def wait(self, timeout:float|None = None) -> bool:
		'''Block until the service is stopped. Returns `False` if `timeout` ran out first.'''

		return self._stopped.wait(timeout)

	def run_pass(self) -> SyncResults|None:
		'''
		Run one sync pass now, unless one is already running.

		Returns
			The `SyncResults` of the pass, or `None` if the pass was skipped.
		'''

		if not self._pass_lock.acquire(blocking=False):
			logger.debug("Sync pass already in progress, skipping.")
			return None
		try:
			with self._state_lock:
				if self._state != StorageSyncService._ServiceState.RUNNING:
					return None
				self._cancel_timer()
			results = synchronize(self._config)
			self.last_results = results
			self.pass_count += 1
			return results
		finally:
			self._pass_lock.release()
			self._arm(self._interval)

	def _on_timer(self) -> None:
		try:
			self.run_pass()
		except Exception:
			# run_pass() has already re-armed the timer
			logger.critical("An unexpected error occurred.", exc_info=True)

	def _arm(self, delay:float) -> None:
		with self._state_lock:
			if self._state != StorageSyncService._ServiceState.RUNNING:
				return
			self._cancel_timer()
			self._timer = threading.Timer(delay, self._on_timer)
			self._timer.daemon = True
			self._timer.start()

	def _cancel_timer(self) -> None:
		if self._timer is not None:
			self._timer.cancel()
			self._timer = None
