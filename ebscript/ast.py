"""AST node definitions for EBS2.

Nodes are frozen dataclasses built once by the parser and never mutated. They
keep only their syntactic children plus the tokens that locate them in the
source. Behaviour lives in visitors: every node forwards ``accept`` to the
matching ``visit_*`` method, so interpretation and printing are separate
:class:`Visitor` subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar

from .tokens import Token

R = TypeVar("R")


class Visitor(Generic[R]):
	def visit_var_statement(self, stmt: "VarStatement") -> R:
		raise NotImplementedError

	def visit_print_statement(self, stmt: "PrintStatement") -> R:
		raise NotImplementedError

	def visit_if_statement(self, stmt: "IfStatement") -> R:
		raise NotImplementedError

	def visit_block_statement(self, stmt: "BlockStatement") -> R:
		raise NotImplementedError

	def visit_expression_statement(self, stmt: "ExpressionStatement") -> R:
		raise NotImplementedError

	def visit_import_statement(self, stmt: "ImportStatement") -> R:
		raise NotImplementedError

	def visit_literal_expression(self, expr: "LiteralExpression") -> R:
		raise NotImplementedError

	def visit_variable_expression(self, expr: "VariableExpression") -> R:
		raise NotImplementedError

	def visit_assign_expression(self, expr: "AssignExpression") -> R:
		raise NotImplementedError

	def visit_binary_expression(self, expr: "BinaryExpression") -> R:
		raise NotImplementedError

	def visit_unary_expression(self, expr: "UnaryExpression") -> R:
		raise NotImplementedError

	def visit_grouping_expression(self, expr: "GroupingExpression") -> R:
		raise NotImplementedError

	def visit_call_expression(self, expr: "CallExpression") -> R:
		raise NotImplementedError


@dataclass(frozen=True)
class Node:
	def accept(self, visitor: Visitor[R]) -> R:
		raise NotImplementedError

	@property
	def line(self) -> int:
		return self.location.line

	@property
	def column(self) -> int:
		return self.location.column

	@property
	def location(self) -> Token:
		raise NotImplementedError


@dataclass(frozen=True)
class Statement(Node):
	pass


@dataclass(frozen=True)
class Expression(Node):
	pass


# ---------------------------------------------------------------------------
# Statements


@dataclass(frozen=True)
class VarStatement(Statement):
	keyword: Token
	name: Token
	type_name: Optional[Token] = None
	initializer: Optional[Expression] = None

	@property
	def location(self) -> Token:
		return self.keyword

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_var_statement(self)


@dataclass(frozen=True)
class PrintStatement(Statement):
	keyword: Token
	expression: Expression

	@property
	def location(self) -> Token:
		return self.keyword

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_print_statement(self)


@dataclass(frozen=True)
class IfStatement(Statement):
	keyword: Token
	condition: Expression
	then_branch: Statement
	else_branch: Optional[Statement] = None
	end_token: Optional[Token] = None

	@property
	def location(self) -> Token:
		return self.keyword

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_if_statement(self)


@dataclass(frozen=True)
class BlockStatement(Statement):
	start: Token
	statements: Tuple[Statement, ...]

	@property
	def location(self) -> Token:
		return self.start

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_block_statement(self)


@dataclass(frozen=True)
class ExpressionStatement(Statement):
	expression: Expression

	@property
	def location(self) -> Token:
		return self.expression.location

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_expression_statement(self)


@dataclass(frozen=True)
class ImportStatement(Statement):
	keyword: Token
	filename: Token

	@property
	def location(self) -> Token:
		return self.keyword

	@property
	def filename_value(self) -> str:
		return self.filename.literal

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_import_statement(self)


# ---------------------------------------------------------------------------
# Expressions


@dataclass(frozen=True)
class LiteralExpression(Expression):
	token: Token
	value: Any

	@property
	def location(self) -> Token:
		return self.token

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_literal_expression(self)


@dataclass(frozen=True)
class VariableExpression(Expression):
	name: Token

	@property
	def location(self) -> Token:
		return self.name

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_variable_expression(self)


@dataclass(frozen=True)
class AssignExpression(Expression):
	name: Token
	value: Expression

	@property
	def location(self) -> Token:
		return self.name

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_assign_expression(self)


@dataclass(frozen=True)
class BinaryExpression(Expression):
	left: Expression
	operator: Token
	right: Expression

	@property
	def location(self) -> Token:
		return self.operator

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_binary_expression(self)


@dataclass(frozen=True)
class UnaryExpression(Expression):
	operator: Token
	operand: Expression

	@property
	def location(self) -> Token:
		return self.operator

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_unary_expression(self)


@dataclass(frozen=True)
class GroupingExpression(Expression):
	left_paren: Token
	expression: Expression
	right_paren: Token

	@property
	def location(self) -> Token:
		return self.left_paren

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_grouping_expression(self)


@dataclass(frozen=True)
class CallExpression(Expression):
	callee: Token
	arguments: Tuple[Expression, ...]
	right_paren: Token

	@property
	def location(self) -> Token:
		return self.callee

	def accept(self, visitor: Visitor[R]) -> R:
		return visitor.visit_call_expression(self)
