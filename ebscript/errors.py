from __future__ import annotations

from typing import Optional

from .tokens import Token


class RuntimeFault(Exception):
	"""Unrecoverable error raised while interpreting; aborts the current run."""

	category = "RuntimeError"

	def __init__(self, message: str, token: Optional[Token] = None) -> None:
		super().__init__(message)
		self.message = message
		self.token = token

	@property
	def line(self) -> Optional[int]:
		return self.token.line if self.token else None

	@property
	def column(self) -> Optional[int]:
		return self.token.column if self.token else None

	def __str__(self) -> str:
		if self.token is None:
			return f"{self.category}: {self.message}"
		return f"[Line {self.line}, Column {self.column}] {self.category}: {self.message}"


class NameResolutionFault(RuntimeFault):
	category = "NameError"


class TypeMismatchFault(RuntimeFault):
	category = "TypeError"


class DivisionByZeroFault(RuntimeFault):
	category = "DivisionByZero"


class StructuralFault(RuntimeFault):
	category = "StructureError"
