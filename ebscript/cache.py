"""Process-wide parse result cache.

Entries are stored under caller-supplied keys and are only ever removed by the
caller (``remove``/``clear``); nothing expires on its own. The cache is shared
between concurrent parse calls, so every access goes through one lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
	from .ast import Statement
	from .lexer import LexerError
	from .parser import ParseError
	from .tokens import Token


@dataclass(frozen=True)
class ParseResult:
	statements: Tuple["Statement", ...]
	errors: Tuple["ParseError", ...]
	tokens: Tuple["Token", ...] = ()
	lexer_errors: Tuple["LexerError", ...] = ()

	@property
	def error_count(self) -> int:
		return len(self.errors) + len(self.lexer_errors)


class ParseCache:
	def __init__(self) -> None:
		self._entries: Dict[str, ParseResult] = {}
		self._lock = threading.Lock()
		self._closed = False

	def get(self, key: str) -> Optional[ParseResult]:
		with self._lock:
			self._check_open()
			return self._entries.get(key)

	def put(self, key: str, result: ParseResult) -> None:
		with self._lock:
			self._check_open()
			self._entries[key] = result

	def remove(self, key: str) -> bool:
		with self._lock:
			self._check_open()
			return self._entries.pop(key, None) is not None

	def clear(self) -> None:
		with self._lock:
			self._check_open()
			self._entries.clear()

	def keys(self) -> List[str]:
		with self._lock:
			self._check_open()
			return list(self._entries)

	def size(self) -> int:
		with self._lock:
			return len(self._entries)

	def close(self) -> None:
		with self._lock:
			self._entries.clear()
			self._closed = True

	@property
	def closed(self) -> bool:
		return self._closed

	def __len__(self) -> int:
		return self.size()

	def __contains__(self, key: object) -> bool:
		with self._lock:
			return key in self._entries

	def __iter__(self) -> Iterator[str]:
		return iter(self.keys())

	def _check_open(self) -> None:
		if self._closed:
			raise RuntimeError("ParseCache has been closed")
