from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from .errors import NameResolutionFault
from .tokens import Token


class Environment:
	"""Flat, case-insensitive name -> value table for one interpretation run."""

	def __init__(self) -> None:
		self.values: Dict[str, Any] = {}
		self.declared_names: Dict[str, str] = {}

	def define(self, name: str, value: Any) -> None:
		key = _key(name)
		self.values[key] = value
		self.declared_names[key] = name

	def get(self, name: str, token: Optional[Token] = None) -> Any:
		key = _key(name)
		if key in self.values:
			return self.values[key]
		raise NameResolutionFault(f"Undefined variable '{name}'", token)

	def assign(self, name: str, value: Any, token: Optional[Token] = None) -> None:
		key = _key(name)
		if key not in self.values:
			raise NameResolutionFault(f"Cannot assign to undeclared variable '{name}'", token)
		self.values[key] = value

	def is_defined(self, name: str) -> bool:
		return _key(name) in self.values

	def snapshot(self) -> Dict[str, Any]:
		"""Current bindings keyed by the spelling used at declaration."""
		return {self.declared_names[key]: value for key, value in self.values.items()}

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and self.is_defined(name)

	def __getitem__(self, name: str) -> Any:
		return self.get(name)

	def __iter__(self) -> Iterator[str]:
		return iter(self.declared_names[key] for key in self.values)

	def __len__(self) -> int:
		return len(self.values)

	def __repr__(self) -> str:
		return f"Environment({self.snapshot()!r})"


def _key(name: str) -> str:
	return name.casefold()
