import pytest

from ebscript.ast import AssignExpression, BlockStatement, ExpressionStatement, IfStatement, PrintStatement, VarStatement
from ebscript.lexer import scan_tokens
from ebscript.parser import ParseErrorKind, Parser
from ebscript.printer import AstPrinter


def parse(source):
	tokens, lexer_errors = scan_tokens(source)
	assert lexer_errors == []
	return Parser(tokens).parse()


def outline(source):
	statements, errors = parse(source)
	assert errors == [], [str(e) for e in errors]
	return AstPrinter().print_program(statements)


# Error reporting ------------------------------------------------------------


def test_missing_variable_name():
	_statements, errors = parse("var = 5")
	assert len(errors) == 1
	error = errors[0]
	assert error.kind == ParseErrorKind.UNEXPECTED_TOKEN
	assert "variable name" in error.message
	assert error.line == 1
	assert str(error) == "[Line 1, Column 5] UNEXPECTED_TOKEN: Expected variable name after 'var' at '='"


def test_missing_type_after_as():
	_statements, errors = parse("var x as = 5")
	assert len(errors) == 1
	assert "type" in errors[0].message


def test_missing_then():
	_statements, errors = parse("if x > 5 print")
	assert errors[0].kind == ParseErrorKind.UNEXPECTED_TOKEN
	assert "then" in errors[0].message


def test_missing_closing_paren():
	_statements, errors = parse("var x = (2 + 3")
	assert len(errors) == 1
	assert ")" in errors[0].message
	assert errors[0].kind == ParseErrorKind.MISSING_TOKEN


def test_expression_at_end_of_input():
	_statements, errors = parse("print")
	assert [e.kind for e in errors] == [ParseErrorKind.UNEXPECTED_EOF]
	assert errors[0].message == "Expected expression"


def test_recovers_and_reports_every_error():
	statements, errors = parse("var = 5\nvar y as = 3\nprint 1")
	assert [e.line for e in errors] == [1, 2]
	assert len(statements) == 1
	assert isinstance(statements[0], PrintStatement)


def test_statements_after_an_error_are_kept():
	statements, errors = parse("var x = 1\nvar = 2\nvar z = 3")
	assert len(errors) == 1
	assert [s.name.lexeme for s in statements] == ["x", "z"]


def test_missing_paren_keeps_the_next_line():
	statements, errors = parse("var x = 1\nprint (1 + 2\nx = 3\nprint x")
	assert len(errors) == 1
	assert errors[0].line == 3
	assert [type(s).__name__ for s in statements] == ["VarStatement", "ExpressionStatement", "PrintStatement"]
	assert isinstance(statements[1].expression, AssignExpression)


def test_deep_parentheses_are_a_parse_error():
	statements, errors = parse("print " + "(" * 100 + "1" + ")" * 100 + "\nprint 2")
	assert len(errors) == 1
	assert errors[0].message == "Expression nested too deeply"
	assert errors[0].kind == ParseErrorKind.INVALID_STRUCTURE
	assert AstPrinter().print_program(statements) == "(print 2)"


def test_moderate_nesting_is_accepted():
	assert outline("print " + "(" * 30 + "1" + ")" * 30).startswith("(print (group (group")
	assert outline("print " + "- " * 30 + "1").endswith("1" + ")" * 31)


def test_deep_unary_chain_is_a_parse_error():
	_statements, errors = parse("print " + "not " * 500 + "true")
	assert [e.message for e in errors] == ["Expression nested too deeply"]


def test_deeply_nested_inline_ifs_are_a_parse_error():
	_statements, errors = parse("if true then " * 60 + "print 1")
	assert [e.message for e in errors] == ["Statements nested too deeply"]


def test_long_operator_chain_parses():
	statements, errors = parse("print " + " + ".join(["1"] * 2000))
	assert errors == []
	assert len(statements) == 1


def test_stray_else():
	statements, errors = parse("else print 1")
	assert len(errors) == 1
	assert "without a matching 'if'" in errors[0].message
	assert errors[0].kind == ParseErrorKind.INVALID_STRUCTURE
	assert len(statements) == 1


def test_stray_end():
	_statements, errors = parse("print 1\nend if")
	assert len(errors) == 1
	assert errors[0].message == "'end' without a matching block"


def test_invalid_assignment_target():
	_statements, errors = parse("1 = 2")
	assert len(errors) == 1
	assert errors[0].message == "Invalid assignment target"


def test_unclosed_if_block():
	_statements, errors = parse("if x then\n  print 1")
	assert len(errors) == 1
	assert "end if" in errors[0].message
	assert errors[0].kind == ParseErrorKind.MISSING_TOKEN


def test_detailed_report_sections():
	_statements, errors = parse("var = 5")
	report = errors[0].detailed_report()
	for section in ("Parse Error", "Location", "Message", "Context", "Token"):
		assert section in report
	assert "var = 5" in errors[0].context


# Tree shape -----------------------------------------------------------------


def test_precedence():
	assert outline("print 1 + 2 * 3") == "(print (+ 1 (* 2 3)))"
	assert outline("print 10 - 4 - 3") == "(print (- (- 10 4) 3))"
	assert outline("print 10 mod 3 + 1") == "(print (+ (mod 10 3) 1))"


def test_logic_precedence():
	assert outline("print a or b and not c") == "(print (or a (and b (not c))))"
	assert outline("print x > 1 == true") == "(print (== (> x 1) true))"


def test_grouping_and_unary():
	assert outline("print (1 + 2) * -x") == "(print (* (group (+ 1 2)) (- x)))"


def test_phrase_operators():
	assert outline("print x is greater than 3") == "(print (is greater than x 3))"
	assert outline("print x is not equal to y") == "(print (is not equal to x y))"


def test_var_with_type_and_initializer():
	statements, errors = parse("var total as number = 5")
	assert errors == []
	stmt = statements[0]
	assert isinstance(stmt, VarStatement)
	assert stmt.name.lexeme == "total"
	assert stmt.type_name.lexeme == "number"
	assert outline("var total as number = 5") == "(var total as number 5)"
	assert outline("variable y") == "(var y)"


def test_assignment_is_right_associative():
	statements, errors = parse("a = b = 3")
	assert errors == []
	expr = statements[0].expression
	assert isinstance(statements[0], ExpressionStatement)
	assert isinstance(expr, AssignExpression)
	assert isinstance(expr.value, AssignExpression)


def test_inline_if_else():
	source = 'if x > 5 then print "big" else print "small"'
	assert outline(source) == '(if (> x 5) (print "big") (print "small"))'
	assert outline(source + " end if") == '(if (> x 5) (print "big") (print "small"))'


def test_block_if():
	source = "if x > 5 then\n  print 1\n  print 2\nelse\n  print 3\nend if\nprint 4"
	statements, errors = parse(source)
	assert errors == []
	assert len(statements) == 2
	stmt = statements[0]
	assert isinstance(stmt, IfStatement)
	assert isinstance(stmt.then_branch, BlockStatement)
	assert len(stmt.then_branch.statements) == 2
	assert AstPrinter().print(stmt) == "(if (> x 5) (block (print 1) (print 2)) (block (print 3)))"


def test_else_if_chain_shares_one_end():
	source = "if x > 5 then\n  print 1\nelse if x > 2 then\n  print 2\nelse\n  print 3\nend if"
	assert outline(source) == "(if (> x 5) (block (print 1)) (if (> x 2) (block (print 2)) (block (print 3))))"


def test_nested_inline_if_inside_block():
	source = "if a then\n  if b then print 1\nend if"
	assert outline(source) == "(if a (block (if b (print 1))))"


def test_calls():
	assert outline("print max(1, 2)") == "(print (call max 1 2))"
	assert outline("greet()") == "(call greet)"


def test_call_paren_on_next_line_is_not_a_call():
	statements, errors = parse("x\n(1)")
	assert errors == []
	assert len(statements) == 2


def test_builtin_names_can_be_variables():
	assert outline("var max = 3\nprint max") == "(var max 3)\n(print max)"


def test_empty_program():
	assert parse("") == ([], [])
	assert parse("// only a comment\n") == ([], [])


def test_parser_appends_missing_eof():
	tokens, _ = scan_tokens("print 1")
	statements, errors = Parser(tokens[:-1]).parse()
	assert errors == []
	assert len(statements) == 1


def test_parse_is_repeatable():
	tokens, _ = scan_tokens("var = 1\nprint 2")
	parser = Parser(tokens)
	first = parser.parse()
	second = parser.parse()
	assert len(first[1]) == len(second[1]) == 1
	assert len(first[0]) == len(second[0]) == 1


@pytest.mark.parametrize("source", ["print 1 +", "var x = ", "if then", "print (1, 2)"])
def test_bad_input_never_raises(source):
	_statements, errors = parse(source)
	assert errors


def test_same_tokens_give_equal_trees():
	tokens, _ = scan_tokens('var x = 1 + 2\nif x > 2 then print "big" else print "small"')
	assert Parser(tokens).parse() == Parser(tokens).parse()
