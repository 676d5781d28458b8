# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

class ConfigurationError(ValueError):
	'''Indicates invalid or contradictory settings. Raised before any sync pass is scheduled.'''
	pass

class ValidationError(ValueError):
	'''Indicates a problem with the source or destination root paths (existence or containment).'''
	pass

class FilesystemError(OSError):
	'''Indicates a failure to enumerate, create, copy, or delete an entry during a sync pass. Fatal to the pass.'''
	def __init__(self, strerror=None, filename=None):
		super().__init__(5, strerror, filename)

	def __str__(self):
		if self.filename:
			return f"{self.strerror}: {self.filename}"
		return str(self.strerror)

class StateError(RuntimeError):
	'''Indicates the object is in (or would be set to) an invalid state.'''
	pass
