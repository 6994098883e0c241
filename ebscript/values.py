"""Runtime value helpers.

EBS2 values map onto plain Python objects: Numbers are ``int``/``float``
(never ``bool``), Text is ``str``, Booleans are ``bool``, and a declared but
unassigned variable holds the :data:`UNDEFINED` sentinel.
"""

from __future__ import annotations

import math
from typing import Any


class _Undefined:
	_instance = None

	def __new__(cls) -> "_Undefined":
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__(self) -> str:
		return "UNDEFINED"

	def __bool__(self) -> bool:
		return False

	def __reduce__(self) -> str:
		return "UNDEFINED"


UNDEFINED = _Undefined()


def is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_text(value: Any) -> bool:
	return isinstance(value, str)


def is_truthy(value: Any) -> bool:
	if value is UNDEFINED:
		return False
	if isinstance(value, bool):
		return value
	return True


def values_equal(left: Any, right: Any) -> bool:
	if left is UNDEFINED or right is UNDEFINED:
		return left is right
	if isinstance(left, bool) or isinstance(right, bool):
		return isinstance(left, bool) and isinstance(right, bool) and left == right
	if is_number(left) and is_number(right):
		return left == right
	if is_text(left) and is_text(right):
		return left == right
	return False


def type_name(value: Any) -> str:
	if value is UNDEFINED:
		return "undefined"
	if isinstance(value, bool):
		return "flag"
	if is_number(value):
		return "number"
	if isinstance(value, str):
		return "text"
	return type(value).__name__


def normalize_number(value: float) -> Any:
	"""Collapse an integral float result back to ``int`` where it is exact."""
	if isinstance(value, float) and math.isfinite(value) and value.is_integer():
		return int(value)
	return value


def stringify(value: Any) -> str:
	if value is UNDEFINED:
		return "undefined"
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float):
		if math.isfinite(value) and value.is_integer():
			return str(int(value))
		return repr(value)
	return str(value)
