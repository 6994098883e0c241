import io

import pytest

from ebscript.config import EngineSettings
from ebscript.diagnostics import Severity
from ebscript.engine import ScriptEngine, summarize_errors
from ebscript.errors import DivisionByZeroFault
from ebscript.lexer import Lexer


@pytest.fixture
def lexer_calls(monkeypatch):
	calls = []
	original = Lexer.scan_tokens

	def counting(self):
		calls.append(self.source)
		return original(self)

	monkeypatch.setattr(Lexer, "scan_tokens", counting)
	return calls


def test_compile_collects_everything():
	art = ScriptEngine().compile("var x = 1\nprint x")
	assert art.error_count == 0
	assert len(art.statements) == 2
	assert art.tokens[-1].type.name == "EOF"
	assert art.diagnostics == []
	assert art.duration_ms >= 0
	assert art.from_cache is False


def test_cache_hit_skips_lexing(lexer_calls):
	engine = ScriptEngine()
	first = engine.compile("print 1", cache_key="k")
	second = engine.compile("print 1", cache_key="k")
	assert len(lexer_calls) == 1
	assert second.from_cache is True
	assert second.statements == first.statements
	assert len(second.tokens) == len(first.tokens)


def test_cache_disabled_lexes_every_time(lexer_calls):
	engine = ScriptEngine(EngineSettings(cache_enabled=False))
	engine.compile("print 1", cache_key="k")
	engine.compile("print 1", cache_key="k")
	assert len(lexer_calls) == 2
	assert engine.cache.size() == 0


def test_invalidate(lexer_calls):
	engine = ScriptEngine()
	engine.compile("print 1", cache_key="a")
	engine.compile("print 2", cache_key="b")
	assert engine.invalidate("a") == 1
	assert engine.invalidate("a") == 0
	engine.compile("print 1", cache_key="a")
	assert len(lexer_calls) == 3
	assert engine.invalidate() == 2
	assert engine.cache.size() == 0


def test_cached_errors_are_replayed():
	engine = ScriptEngine()
	engine.compile("var = 1", cache_key="bad")
	art = engine.compile("var = 1", cache_key="bad")
	assert art.from_cache
	assert art.error_count == 1
	assert art.diagnostics[0].origin == "parser"
	assert art.diagnostics[0].kind == "UNEXPECTED_TOKEN"


def test_lexer_errors_become_diagnostics():
	art = ScriptEngine().compile("print 1 @")
	assert len(art.lexer_errors) == 1
	diag = art.diagnostics[0]
	assert diag.origin == "lexer"
	assert diag.severity == Severity.ERROR
	assert (diag.line, diag.column) == (1, 9)


def test_run_success():
	result = ScriptEngine().run("var x = 20\nprint x + 22")
	assert result.success
	assert result.output == "42\n"
	assert result.environment.get("x") == 20
	assert result.runtime_error is None


def test_run_forwards_output_to_sink():
	sink = io.StringIO()
	result = ScriptEngine().run("print 1\nprint 2", output=sink)
	assert sink.getvalue() == result.output == "1\n2\n"


def test_script_with_errors_is_not_executed():
	result = ScriptEngine().run("print 1\nvar = 2")
	assert not result.success
	assert result.output == ""
	assert result.environment is None
	assert result.compilation.error_count == 1


def test_runtime_fault_is_reported():
	result = ScriptEngine().run("print 1\nprint 1 / 0")
	assert not result.success
	assert result.output == "1\n"
	assert isinstance(result.runtime_error, DivisionByZeroFault)
	assert result.diagnostics[-1].origin == "runtime"
	assert result.diagnostics[-1].kind == "DivisionByZero"


def test_run_with_functions():
	result = ScriptEngine().run("print double(21)", functions={"double": lambda n: n * 2})
	assert result.output == "42\n"


def test_error_messages():
	art = ScriptEngine().validate("var = 1\nprint (")
	assert art.error_count == 2
	assert all(message.startswith("[Line ") for message in art.error_messages)


def test_summarize_errors():
	assert summarize_errors(0) == "No errors found"
	assert summarize_errors(1) == "1 error found"
	assert summarize_errors(3) == "3 errors found"
