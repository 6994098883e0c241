from ebscript.lexer import scan_tokens
from ebscript.parser import Parser
from ebscript.printer import AstPrinter, to_outline


def statements(source):
	tokens, _ = scan_tokens(source)
	result, errors = Parser(tokens).parse()
	assert errors == []
	return result


def test_literals():
	printer = AstPrinter()
	assert printer.print_program(statements('print "say \\"hi\\""\nprint 2.5\nprint false')) == '(print "say \\"hi\\"")\n(print 2.5)\n(print false)'


def test_import_and_assignment():
	assert AstPrinter().print_program(statements('import "lib"\nx = 1')) == '(import "lib")\n(= x 1)'


def test_outline_is_plain_data():
	tree = to_outline(statements("var x = 1 + 2"))
	assert tree[0]["node"] == "VarStatement"
	assert tree[0]["name"] == "x"
	assert tree[0]["type_name"] is None
	initializer = tree[0]["initializer"]
	assert initializer["node"] == "BinaryExpression"
	assert initializer["operator"] == "+"
	assert initializer["left"]["value"] == 1
	assert (initializer["line"], initializer["column"]) == (1, 11)
