"""Renders an AST as a parenthesised outline, e.g. ``(print (+ 1 (* 2 3)))``."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .ast import (
	AssignExpression,
	BinaryExpression,
	BlockStatement,
	CallExpression,
	ExpressionStatement,
	GroupingExpression,
	IfStatement,
	ImportStatement,
	LiteralExpression,
	Node,
	PrintStatement,
	Statement,
	UnaryExpression,
	VarStatement,
	VariableExpression,
	Visitor,
)
from .tokens import Token
from .values import UNDEFINED


class AstPrinter(Visitor[str]):
	def print(self, node: Node) -> str:
		return node.accept(self)

	def print_program(self, statements: Sequence[Statement]) -> str:
		return "\n".join(self.print(stmt) for stmt in statements)

	def visit_var_statement(self, stmt: VarStatement) -> str:
		parts = ["var", stmt.name.lexeme]
		if stmt.type_name is not None:
			parts.append(f"as {stmt.type_name.lexeme.lower()}")
		if stmt.initializer is not None:
			parts.append(self.print(stmt.initializer))
		return _paren(parts)

	def visit_print_statement(self, stmt: PrintStatement) -> str:
		return _paren(["print", self.print(stmt.expression)])

	def visit_if_statement(self, stmt: IfStatement) -> str:
		parts = ["if", self.print(stmt.condition), self.print(stmt.then_branch)]
		if stmt.else_branch is not None:
			parts.append(self.print(stmt.else_branch))
		return _paren(parts)

	def visit_block_statement(self, stmt: BlockStatement) -> str:
		return _paren(["block"] + [self.print(inner) for inner in stmt.statements])

	def visit_expression_statement(self, stmt: ExpressionStatement) -> str:
		return self.print(stmt.expression)

	def visit_import_statement(self, stmt: ImportStatement) -> str:
		return _paren(["import", _quote(stmt.filename_value)])

	def visit_literal_expression(self, expr: LiteralExpression) -> str:
		value = expr.value
		if value is UNDEFINED:
			return "undefined"
		if isinstance(value, bool):
			return "true" if value else "false"
		if isinstance(value, str):
			return _quote(value)
		return str(value)

	def visit_variable_expression(self, expr: VariableExpression) -> str:
		return expr.name.lexeme

	def visit_assign_expression(self, expr: AssignExpression) -> str:
		return _paren(["=", expr.name.lexeme, self.print(expr.value)])

	def visit_binary_expression(self, expr: BinaryExpression) -> str:
		chain: List[BinaryExpression] = []
		node: Node = expr
		while isinstance(node, BinaryExpression):
			chain.append(node)
			node = node.left
		text = self.print(node)
		for current in reversed(chain):
			text = _paren([_operator(current.operator), text, self.print(current.right)])
		return text

	def visit_unary_expression(self, expr: UnaryExpression) -> str:
		return _paren([_operator(expr.operator), self.print(expr.operand)])

	def visit_grouping_expression(self, expr: GroupingExpression) -> str:
		return _paren(["group", self.print(expr.expression)])

	def visit_call_expression(self, expr: CallExpression) -> str:
		return _paren(["call", expr.callee.lexeme] + [self.print(arg) for arg in expr.arguments])


def _paren(parts: List[str]) -> str:
	return "(" + " ".join(parts) + ")"


def _quote(text: str) -> str:
	return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _operator(token: Token) -> str:
	# natural phrases render as their words, normalised
	return " ".join(token.lexeme.lower().split())


# JSON outline ---------------------------------------------------------------


def to_outline(node: Any) -> Any:
	"""Plain dict/list tree of a node for JSON transport; tokens become lexemes."""
	if isinstance(node, Node):
		data: Dict[str, Any] = {"node": type(node).__name__, "line": node.line, "column": node.column}
		for name in node.__dataclass_fields__:  # type: ignore[attr-defined]
			data[name] = to_outline(getattr(node, name))
		return data
	if isinstance(node, Token):
		return node.lexeme
	if isinstance(node, (list, tuple)):
		return [to_outline(item) for item in node]
	if node is UNDEFINED:
		return None
	return node
