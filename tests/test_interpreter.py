import io

import pytest

from ebscript.ast import GroupingExpression, LiteralExpression, PrintStatement
from ebscript.builtins import BUILTINS
from ebscript.environment import Environment
from ebscript.errors import DivisionByZeroFault, NameResolutionFault, StructuralFault, TypeMismatchFault
from ebscript.interpreter import Interpreter
from ebscript.lexer import scan_tokens
from ebscript.parser import Parser
from ebscript.tokens import BUILTIN_FUNCTIONS, Token, TokenType
from ebscript.values import UNDEFINED


def compile_source(source):
	tokens, lexer_errors = scan_tokens(source)
	statements, errors = Parser(tokens).parse()
	assert lexer_errors == [] and errors == [], [str(e) for e in errors]
	return statements


def run(source, **kwargs):
	out = io.StringIO()
	env = Interpreter(out, **kwargs).execute(compile_source(source))
	return out.getvalue(), env


def output(source, **kwargs):
	return run(source, **kwargs)[0]


# Arithmetic -----------------------------------------------------------------


def test_division_of_integers():
	assert output("print 10 / 5") == "2\n"
	assert output("print 7 / 2") == "3.5\n"


def test_modulo():
	assert output("print 10 mod 3") == "1\n"
	assert output("print -7 mod 3") == "-1\n"
	assert output("print 7.5 mod 2") == "1.5\n"


def test_operator_precedence():
	assert output("print 2 + 3 * 4") == "14\n"
	assert output("print (2 + 3) * 4") == "20\n"
	assert output("print 10 - 4 - 3") == "3\n"


def test_text_concatenation():
	assert output('print "Hello, " + "World"') == "Hello, World\n"


def test_mixed_plus_is_a_type_fault():
	with pytest.raises(TypeMismatchFault) as info:
		run('print "a" + 1')
	assert info.value.line == 1


def test_arithmetic_needs_numbers():
	with pytest.raises(TypeMismatchFault):
		run('print "a" * 2')
	with pytest.raises(TypeMismatchFault):
		run('print -"a"')


def test_division_by_zero_keeps_earlier_output():
	out = io.StringIO()
	interpreter = Interpreter(out)
	with pytest.raises(DivisionByZeroFault) as info:
		interpreter.execute(compile_source("print 1\nprint 1 / 0\nprint 2"))
	assert out.getvalue() == "1\n"
	assert info.value.line == 2
	assert "DivisionByZero" in str(info.value)


def test_modulo_by_zero():
	with pytest.raises(DivisionByZeroFault):
		run("print 5 mod 0")


# Comparison and logic -------------------------------------------------------


def test_comparisons():
	assert output("print 5 > 3") == "true\n"
	assert output("print 5 < 3") == "false\n"
	assert output("print 3 >= 3") == "true\n"
	assert output("print 5 is greater than 3") == "true\n"
	assert output("print 2 is less than or equal to 1") == "false\n"


def test_comparison_needs_numbers():
	with pytest.raises(TypeMismatchFault):
		run('print "a" < "b"')


def test_equality_has_no_cross_type_matches():
	assert output("print 1 == 1.0") == "true\n"
	assert output('print "1" == 1') == "false\n"
	assert output("print 1 == true") == "false\n"
	assert output('print "a" is equal to "a"') == "true\n"
	assert output("print 1 != 2") == "true\n"
	assert output("print 1 is not equal to 1") == "false\n"


def test_short_circuit():
	calls = []

	def side_effect():
		calls.append(1)
		return True

	functions = {"sideEffect": side_effect}
	assert output("print false and sideEffect()", functions=functions) == "false\n"
	assert output("print true or sideEffect()", functions=functions) == "true\n"
	assert calls == []
	assert output("print true and sideEffect()", functions=functions) == "true\n"
	assert calls == [1]


def test_logic_results_are_booleans():
	assert output("print 1 and 2") == "true\n"
	assert output("print not 0") == "false\n"


def test_truthiness():
	assert output('if 0 then print "yes" else print "no"') == "yes\n"
	assert output('if "" then print "yes" else print "no"') == "yes\n"
	assert output('var u\nif u then print "yes" else print "no"') == "no\n"


# Variables ------------------------------------------------------------------


def test_declaration_without_initializer():
	out, env = run("var x\nprint x")
	assert out == "undefined\n"
	assert env.get("x") is UNDEFINED


def test_names_are_case_insensitive():
	assert output("var Count = 1\nCOUNT = count + 1\nprint cOuNt") == "2\n"


def test_redeclaration_rebinds():
	assert output("var x = 1\nvar x = 2\nprint x") == "2\n"


def test_undeclared_read_and_assignment():
	with pytest.raises(NameResolutionFault) as info:
		run("print missing")
	assert "missing" in str(info.value)
	assert info.value.line == 1
	with pytest.raises(NameResolutionFault):
		run("y = 5")


def test_final_environment_is_returned():
	_out, env = run("var a = 1\nvar b = a + 1\nvar name as text = \"Bob\"")
	assert env.snapshot() == {"a": 1, "b": 2, "name": "Bob"}


def test_execute_in_existing_environment():
	env = Environment()
	env.define("seed", 40)
	out = io.StringIO()
	returned = Interpreter(out).execute(compile_source("print seed + 2"), env)
	assert returned is env
	assert out.getvalue() == "42\n"


# Control flow ---------------------------------------------------------------


def test_if_executes_one_branch():
	source = "var x = 10\nif x > 5 then print \"big\" else print \"small\""
	assert output(source) == "big\n"
	assert output(source.replace("10", "1")) == "small\n"


def test_block_if_runs_in_same_environment():
	source = "var x = 1\nif x == 1 then\n  var y = 2\n  x = x + y\nend if\nprint x\nprint y"
	assert output(source) == "3\n2\n"


def test_else_if_chain():
	source = (
		"var n = 3\n"
		"if n > 5 then\n  print \"big\"\n"
		"else if n > 2 then\n  print \"medium\"\n"
		"else\n  print \"small\"\n"
		"end if"
	)
	assert output(source) == "medium\n"


def test_import_is_ignored_at_run_time():
	assert output('import "lib.ebs"\nprint 1') == "1\n"


# Printing -------------------------------------------------------------------


def test_print_formats():
	assert output("print 4.0 / 2") == "2\n"
	assert output("print true") == "true\n"
	assert output('print "plain text"') == "plain text\n"


def test_callable_sink():
	lines = []
	Interpreter(lines.append).execute(compile_source("print 1\nprint 2"))
	assert lines == ["1\n", "2\n"]


def test_default_sink_is_stdout(capsys):
	Interpreter().execute(compile_source('print "hi"'))
	assert capsys.readouterr().out == "hi\n"


def test_bad_sink_is_rejected():
	with pytest.raises(TypeError):
		Interpreter(42)


# Built-ins ------------------------------------------------------------------


def test_builtin_calls():
	assert output('print toUpper("abc")') == "ABC\n"
	assert output("print max(1, 5, 3)") == "5\n"
	assert output("print round(2.5)") == "3\n"
	assert output('print substring("hello", 1, 3)') == "el\n"
	assert output('print toNumber("12") + 1') == "13\n"
	assert output("print sqrt(16)") == "4\n"


def test_builtin_names_are_case_insensitive():
	assert output('print TOUPPER("a")') == "A\n"


def test_unknown_function():
	with pytest.raises(NameResolutionFault):
		run("print nothingHere(1)")


def test_builtin_bad_argument_becomes_type_fault():
	with pytest.raises(TypeMismatchFault):
		run("print toUpper(5)")
	with pytest.raises(TypeMismatchFault):
		run('print toNumber("abc")')
	with pytest.raises(TypeMismatchFault):
		run("print abs()")


def test_division_by_zero_prints_nothing():
	out = io.StringIO()
	with pytest.raises(DivisionByZeroFault):
		Interpreter(out).execute(compile_source("print 10 / 0"))
	assert out.getvalue() == ""


def test_power_with_a_complex_result_is_a_type_fault():
	assert output("print pow(2, 10)") == "1024\n"
	with pytest.raises(TypeMismatchFault):
		run("print pow(-8, 0.5)")


# Deep expressions -----------------------------------------------------------


def test_precedence_when_evaluating():
	assert output("print 1 + 2 * 3") == "7\n"


def test_long_operator_chain():
	assert output("print " + " + ".join(["1"] * 600)) == "600\n"
	assert output("print " + " - ".join(["1"] * 2000)) == "-1998\n"


def test_long_logic_chain_short_circuits():
	calls = []

	def side_effect():
		calls.append(1)
		return True

	source = "print false and " + " and ".join(["sideEffect()"] * 500)
	assert output(source, functions={"sideEffect": side_effect}) == "false\n"
	assert calls == []


def test_runaway_nesting_becomes_a_structural_fault():
	def token(kind, lexeme):
		return Token(kind, lexeme, None, 1, 1, 0, len(lexeme))

	expr = LiteralExpression(token(TokenType.NUMBER, "1"), 1)
	for _ in range(5000):
		expr = GroupingExpression(token(TokenType.LPAREN, "("), expr, token(TokenType.RPAREN, ")"))
	statement = PrintStatement(token(TokenType.PRINT, "print"), expr)
	out = io.StringIO()
	with pytest.raises(StructuralFault) as info:
		Interpreter(out).execute([statement])
	assert info.value.message == "Expression nested too deeply"
	assert info.value.line == 1
	assert out.getvalue() == ""


def test_every_builtin_name_has_an_implementation():
	assert BUILTIN_FUNCTIONS == frozenset(BUILTINS)
