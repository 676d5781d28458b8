# Copyright (c) 2025 Joe Walter
# GNU General Public License v3.0

import re
from typing import Iterable, Iterator

from .errors import ConfigurationError

class NamePattern:
	'''
	A case-insensitive matcher for a single entry name, compiled from a filespec such as "*.txt" or "file?.log".

	`*` matches any run of characters (including none), `?` matches exactly one character, and everything else is matched literally. The pattern is anchored to the whole name.

	>>> NamePattern("*.TXT").match("notes.txt")
	True
	>>> NamePattern("*.txt").match("notes.txt.bak")
	False
	>>> NamePattern("file?.log").match("file1.log"), NamePattern("file?.log").match("file.log")
	(True, False)
	>>> NamePattern("a.b").match("axb")
	False
	'''

	def __init__(self, filespec:str):
		if not isinstance(filespec, str):
			raise ConfigurationError(f"Bad type for filespec (expected str): {filespec!r}")
		spec = filespec.strip()
		if not spec:
			raise ConfigurationError(f"Empty filespec: {filespec!r}")

		self.filespec : str = spec
		self.regex    : str = NamePattern._translate(spec)
		# every character but the wildcards is escaped, so the regex always compiles
		self.matcher  : re.Pattern = re.compile(self.regex, flags=re.IGNORECASE | re.DOTALL)

	@staticmethod
	def _translate(spec:str) -> str:
		'''
		Convert a filespec into an anchored regular expression.

		>>> NamePattern._translate("*.t?t")
		'^.*\\\\.t.t$'
		'''

		parts = []
		for c in spec:
			if c == "*":
				parts.append(".*")
			elif c == "?":
				parts.append(".")
			else:
				parts.append(re.escape(c))
		return "^" + "".join(parts) + "$"

	def match(self, name:str) -> bool:
		return self.matcher.fullmatch(name) is not None

	def __str__(self):
		return self.filespec

	def __repr__(self):
		return f"NamePattern({self.filespec!r})"

class MatcherSet:
	'''
	An ordered collection of `NamePattern`s. A name matches the set if it matches any member.

	>>> m = MatcherSet.from_filespecs(["*.tmp", "Thumbs.db"])
	>>> m.match("x.TMP"), m.match("thumbs.db"), m.match("a.txt")
	(True, True, False)
	>>> MatcherSet.from_filespecs(None) is None
	True
	'''

	def __init__(self, patterns:Iterable[NamePattern]):
		self.patterns : tuple[NamePattern, ...] = tuple(patterns)

	@classmethod
	def from_filespecs(cls, filespecs:Iterable[str]|None) -> "MatcherSet|None":
		'''Compile a list of filespecs. `None` means the set is not configured.'''

		if filespecs is None:
			return None
		if isinstance(filespecs, str):
			raise ConfigurationError(f"Expected a list of filespecs, not a string: {filespecs!r}")
		return cls(NamePattern(spec) for spec in filespecs)

	def match(self, name:str) -> bool:
		return any(p.match(name) for p in self.patterns)

	def __iter__(self) -> Iterator[NamePattern]:
		return iter(self.patterns)

	def __len__(self) -> int:
		return len(self.patterns)

	def __eq__(self, other):
		if not isinstance(other, MatcherSet):
			return NotImplemented
		return [p.filespec for p in self.patterns] == [p.filespec for p in other.patterns]

	def __hash__(self):
		return hash(tuple(p.filespec for p in self.patterns))

	def __str__(self):
		return " ".join(str(p) for p in self.patterns)

	def __repr__(self):
		return "[" + ", ".join(repr(p) for p in self.patterns) + "]"

def should_exclude(exclude:MatcherSet|None, include:MatcherSet|None, name:str) -> bool:
	'''
	Decide whether `name` should be left out, given an optional exclude set and an optional include set.

	If an exclude set is given, the include set is not consulted.

	>>> xs = MatcherSet.from_filespecs(["*.bak"])
	>>> should_exclude(xs, None, "a.bak"), should_exclude(xs, None, "a.txt")
	(True, False)
	>>> should_exclude(None, xs, "a.bak"), should_exclude(None, xs, "a.txt")
	(False, True)
	>>> should_exclude(None, None, "anything")
	False
	'''

	if exclude is not None:
		return exclude.match(name)
	elif include is not None:
		return not include.match(name)
	return False
