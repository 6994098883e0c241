from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional

from .errors import RuntimeFault
from .lexer import LexerError
from .parser import ParseError


class Severity(Enum):
	INFO = auto()
	WARNING = auto()
	ERROR = auto()


@dataclass
class Diagnostic:
	severity: Severity
	message: str
	line: Optional[int] = None
	column: Optional[int] = None
	length: int = 1
	origin: str = "parser"
	kind: Optional[str] = None

	@property
	def location(self) -> str:
		if self.line is None:
			return "-"
		return f"{self.line}:{self.column}"

	def __str__(self) -> str:
		kind = f" {self.kind}" if self.kind else ""
		return f"[{self.severity.name}{kind}] line {self.line if self.line is not None else '-'}: {self.message}"


class DiagnosticEngine:
	def __init__(self) -> None:
		self._items: List[Diagnostic] = []

	@property
	def items(self) -> List[Diagnostic]:
		return self._items

	@property
	def error_count(self) -> int:
		return sum(1 for d in self._items if d.severity == Severity.ERROR)

	def report(
		self,
		severity: Severity,
		message: str,
		line: Optional[int] = None,
		column: Optional[int] = None,
		length: int = 1,
		origin: str = "parser",
		kind: Optional[str] = None,
	) -> None:
		self._items.append(Diagnostic(severity, message, line, column, length, origin, kind))

	def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
		self._items.extend(diagnostics)

	def clear(self) -> None:
		self._items.clear()

	# Converters from pipeline errors --------------------------------------------

	def report_lexer_errors(self, errors: Iterable[LexerError]) -> None:
		for err in errors:
			self.report(Severity.ERROR, err.message, err.line, err.column, origin="lexer", kind="LEXICAL")

	def report_parse_errors(self, errors: Iterable[ParseError]) -> None:
		for err in errors:
			length = max(1, len(err.lexeme))
			self.report(Severity.ERROR, err.message, err.line, err.column, length, origin="parser", kind=err.kind.name)

	def report_runtime_fault(self, fault: RuntimeFault) -> None:
		length = max(1, len(fault.token.lexeme)) if fault.token is not None else 1
		self.report(Severity.ERROR, fault.message, fault.line, fault.column, length, origin="runtime", kind=fault.category)
