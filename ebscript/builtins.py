"""Script-level built-in functions.

Each built-in is a plain Python callable over runtime values. The interpreter
looks names up case-insensitively and turns Python ``TypeError``/``ValueError``
raised here into a :class:`~ebscript.errors.TypeMismatchFault`.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict

from .values import UNDEFINED, is_number, is_truthy, normalize_number, stringify

Builtin = Callable[..., Any]


def _number(value: Any) -> Any:
	if not is_number(value):
		raise TypeError(f"expected a number, got {stringify(value)!r}")
	return value


def _text(value: Any) -> str:
	if not isinstance(value, str):
		raise TypeError(f"expected text, got {stringify(value)!r}")
	return value


def _index(value: Any) -> int:
	number = _number(value)
	if isinstance(number, float) and not number.is_integer():
		raise ValueError(f"expected a whole number, got {stringify(number)}")
	return int(number)


def to_number(value: Any) -> Any:
	if is_number(value):
		return value
	if isinstance(value, bool):
		return 1 if value else 0
	text = _text(value).strip()
	try:
		return int(text)
	except ValueError:
		pass
	try:
		return normalize_number(float(text))
	except ValueError:
		raise ValueError(f"cannot convert {value!r} to a number") from None


def to_int(value: Any) -> int:
	return int(to_number(value))


def to_flag(value: Any) -> bool:
	if isinstance(value, str):
		lowered = value.strip().lower()
		if lowered in ("true", "yes", "y", "1"):
			return True
		if lowered in ("false", "no", "n", "0", ""):
			return False
		raise ValueError(f"cannot convert {value!r} to a flag")
	if is_number(value):
		return value != 0
	return is_truthy(value)


def substring(text: Any, start: Any, end: Any = UNDEFINED) -> str:
	value = _text(text)
	if end is UNDEFINED:
		return value[_index(start) :]
	return value[_index(start) : _index(end)]


def char_at(text: Any, index: Any) -> str:
	value = _text(text)
	position = _index(index)
	if position < 0 or position >= len(value):
		raise ValueError(f"index {position} out of range for text of length {len(value)}")
	return value[position]


def pad_left(text: Any, width: Any, fill: Any = " ") -> str:
	return _text(text).rjust(_index(width), _text(fill)[:1] or " ")


def pad_right(text: Any, width: Any, fill: Any = " ") -> str:
	return _text(text).ljust(_index(width), _text(fill)[:1] or " ")


def round_half_up(value: Any, digits: Any = 0) -> Any:
	number = _number(value)
	places = _index(digits)
	factor = 10 ** places
	result = math.floor(abs(number) * factor + 0.5) / factor
	return normalize_number(math.copysign(result, number))


def square_root(value: Any) -> Any:
	number = _number(value)
	if number < 0:
		raise ValueError("cannot take the square root of a negative number")
	return normalize_number(math.sqrt(number))


def power(base: Any, exponent: Any) -> Any:
	# math.pow raises ValueError where the result would be complex
	return normalize_number(math.pow(_number(base), _number(exponent)))


def _minimum(*values: Any) -> Any:
	if not values:
		raise TypeError("min() needs at least one number")
	return min(_number(v) for v in values)


def _maximum(*values: Any) -> Any:
	if not values:
		raise TypeError("max() needs at least one number")
	return max(_number(v) for v in values)


BUILTINS: Dict[str, Builtin] = {
	"totext": lambda value: stringify(value),
	"tonumber": to_number,
	"toint": to_int,
	"toflag": to_flag,
	"toupper": lambda text: _text(text).upper(),
	"touppercase": lambda text: _text(text).upper(),
	"tolower": lambda text: _text(text).lower(),
	"tolowercase": lambda text: _text(text).lower(),
	"trim": lambda text: _text(text).strip(),
	"trimleft": lambda text: _text(text).lstrip(),
	"trimstart": lambda text: _text(text).lstrip(),
	"trimright": lambda text: _text(text).rstrip(),
	"trimend": lambda text: _text(text).rstrip(),
	"substring": substring,
	"substr": substring,
	"replace": lambda text, old, new: _text(text).replace(_text(old), _text(new)),
	"contains": lambda text, part: _text(part) in _text(text),
	"indexof": lambda text, part: _text(text).find(_text(part)),
	"lastindexof": lambda text, part: _text(text).rfind(_text(part)),
	"startswith": lambda text, prefix: _text(text).startswith(_text(prefix)),
	"endswith": lambda text, suffix: _text(text).endswith(_text(suffix)),
	"charat": char_at,
	"padleft": pad_left,
	"padright": pad_right,
	"reverse": lambda text: _text(text)[::-1],
	"abs": lambda value: abs(_number(value)),
	"ceil": lambda value: math.ceil(_number(value)),
	"floor": lambda value: math.floor(_number(value)),
	"round": round_half_up,
	"sqrt": square_root,
	"pow": power,
	"min": _minimum,
	"max": _maximum,
}
