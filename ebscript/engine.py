"""Script pipeline facade used by the CLI, the HTTP API and the console."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .ast import Statement
from .builtins import Builtin
from .cache import ParseCache, ParseResult
from .config import EngineSettings
from .diagnostics import Diagnostic, DiagnosticEngine
from .environment import Environment
from .errors import RuntimeFault
from .interpreter import Interpreter, OutputSink, sink_writer
from .lexer import Lexer, LexerError
from .parser import ParseError, Parser
from .tokens import Token

logger = logging.getLogger(__name__)


@dataclass
class CompilationArtifacts:
	tokens: List[Token]
	statements: List[Statement]
	lexer_errors: List[LexerError]
	parse_errors: List[ParseError]
	diagnostics: List[Diagnostic]
	duration_ms: float
	from_cache: bool = False

	@property
	def error_count(self) -> int:
		return len(self.lexer_errors) + len(self.parse_errors)

	@property
	def has_errors(self) -> bool:
		return self.error_count > 0

	@property
	def error_messages(self) -> List[str]:
		return [str(err) for err in self.lexer_errors] + [str(err) for err in self.parse_errors]


@dataclass
class RunArtifacts:
	compilation: CompilationArtifacts
	output: str = ""
	environment: Optional[Environment] = None
	runtime_error: Optional[RuntimeFault] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)
	duration_ms: float = 0.0

	@property
	def success(self) -> bool:
		return not self.compilation.has_errors and self.runtime_error is None


class ScriptEngine:
	def __init__(self, settings: Optional[EngineSettings] = None, cache: Optional[ParseCache] = None) -> None:
		self.settings = settings or EngineSettings()
		self.cache = cache if cache is not None else ParseCache()

	def tokenize(self, source: str) -> Tuple[List[Token], List[LexerError]]:
		return Lexer(source).scan_tokens()

	def compile(self, source: str, cache_key: Optional[str] = None) -> CompilationArtifacts:
		start = time.perf_counter()
		use_cache = cache_key is not None and self.settings.cache_enabled

		if use_cache:
			cached = self.cache.get(cache_key)  # type: ignore[arg-type]
			if cached is not None:
				logger.debug("Parse cache hit for %r", cache_key)
				return self._artifacts(
					list(cached.tokens),
					list(cached.statements),
					list(cached.lexer_errors),
					list(cached.errors),
					start,
					from_cache=True,
				)

		tokens, lexer_errors = self.tokenize(source)
		statements, parse_errors = Parser(tokens).parse()

		if use_cache:
			self.cache.put(
				cache_key,  # type: ignore[arg-type]
				ParseResult(tuple(statements), tuple(parse_errors), tuple(tokens), tuple(lexer_errors)),
			)

		artifacts = self._artifacts(tokens, statements, lexer_errors, parse_errors, start)
		logger.debug(
			"Compiled %d token(s) into %d statement(s) with %d error(s) in %.2f ms",
			len(tokens),
			len(statements),
			artifacts.error_count,
			artifacts.duration_ms,
		)
		return artifacts

	def validate(self, source: str) -> CompilationArtifacts:
		return self.compile(source)

	def run(
		self,
		source: str,
		output: Optional[OutputSink] = None,
		cache_key: Optional[str] = None,
		functions: Optional[Mapping[str, Builtin]] = None,
		environment: Optional[Environment] = None,
	) -> RunArtifacts:
		start = time.perf_counter()
		compilation = self.compile(source, cache_key=cache_key)
		result = RunArtifacts(compilation=compilation, diagnostics=list(compilation.diagnostics))
		if compilation.has_errors:
			logger.debug("Not executing: %s", summarize_errors(compilation.error_count))
			result.duration_ms = (time.perf_counter() - start) * 1000
			return result

		captured: List[str] = []
		forward = sink_writer(output) if output is not None else None
		interpreter = Interpreter(_capture(captured, forward), functions=functions)
		try:
			result.environment = interpreter.execute(compilation.statements, environment)
		except RuntimeFault as fault:
			logger.debug("Runtime fault: %s", fault)
			result.runtime_error = fault
			result.environment = interpreter.environment
			diagnostics = DiagnosticEngine()
			diagnostics.report_runtime_fault(fault)
			result.diagnostics.extend(diagnostics.items)
		result.output = "".join(captured)
		result.duration_ms = (time.perf_counter() - start) * 1000
		return result

	def invalidate(self, cache_key: Optional[str] = None) -> int:
		"""Drop one cached entry, or all of them when no key is given; returns how many went."""
		if cache_key is None:
			count = self.cache.size()
			self.cache.clear()
			return count
		return 1 if self.cache.remove(cache_key) else 0

	def _artifacts(
		self,
		tokens: List[Token],
		statements: List[Statement],
		lexer_errors: List[LexerError],
		parse_errors: List[ParseError],
		start: float,
		from_cache: bool = False,
	) -> CompilationArtifacts:
		diagnostics = DiagnosticEngine()
		diagnostics.report_lexer_errors(lexer_errors)
		diagnostics.report_parse_errors(parse_errors)
		duration_ms = (time.perf_counter() - start) * 1000
		return CompilationArtifacts(
			tokens=tokens,
			statements=statements,
			lexer_errors=lexer_errors,
			parse_errors=parse_errors,
			diagnostics=diagnostics.items,
			duration_ms=duration_ms,
			from_cache=from_cache,
		)


def _capture(buffer: List[str], forward: Optional[Callable[[str], Any]]) -> Callable[[str], None]:
	def write(text: str) -> None:
		buffer.append(text)
		if forward is not None:
			forward(text)

	return write


def summarize_errors(count: int) -> str:
	if count == 0:
		return "No errors found"
	if count == 1:
		return "1 error found"
	return f"{count} errors found"
