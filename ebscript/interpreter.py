"""Tree-walking interpreter for the EBS2 AST.

Execution is fail-fast: the first :class:`~ebscript.errors.RuntimeFault`
aborts the run. Output produced before the fault has already been written to
the sink.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TextIO, Union

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
	PrintStatement,
	Statement,
	UnaryExpression,
	VarStatement,
	VariableExpression,
	Visitor,
)
from .builtins import BUILTINS, Builtin
from .environment import Environment
from .errors import DivisionByZeroFault, NameResolutionFault, RuntimeFault, StructuralFault, TypeMismatchFault
from .tokens import Token, TokenType
from .values import UNDEFINED, is_number, is_text, is_truthy, normalize_number, stringify, type_name, values_equal

logger = logging.getLogger(__name__)

OutputSink = Union[TextIO, Callable[[str], Any]]

NUMERIC_COMPARISONS: Dict[TokenType, Callable[[Any, Any], bool]] = {
	TokenType.GREATER_THAN: lambda a, b: a > b,
	TokenType.IS_GREATER_THAN: lambda a, b: a > b,
	TokenType.GREATER_EQUAL: lambda a, b: a >= b,
	TokenType.IS_GREATER_EQUAL: lambda a, b: a >= b,
	TokenType.LESS_THAN: lambda a, b: a < b,
	TokenType.IS_LESS_THAN: lambda a, b: a < b,
	TokenType.LESS_EQUAL: lambda a, b: a <= b,
	TokenType.IS_LESS_EQUAL: lambda a, b: a <= b,
}


class Interpreter(Visitor[Any]):
	def __init__(self, output: Optional[OutputSink] = None, functions: Optional[Mapping[str, Builtin]] = None) -> None:
		self._write = sink_writer(output if output is not None else sys.stdout)
		self.functions: Dict[str, Builtin] = dict(BUILTINS)
		for name, fn in (functions or {}).items():
			self.functions[name.casefold()] = fn
		self.environment = Environment()

	def execute(self, statements: Sequence[Statement], environment: Optional[Environment] = None) -> Environment:
		self.environment = environment if environment is not None else Environment()
		logger.debug("Executing %d statement(s)", len(statements))
		for stmt in statements:
			try:
				self._execute(stmt)
			except RecursionError:
				raise StructuralFault("Expression nested too deeply", stmt.location) from None
		return self.environment

	def evaluate(self, expr: Any) -> Any:
		return expr.accept(self)

	def _execute(self, stmt: Statement) -> None:
		stmt.accept(self)

	# Statements ---------------------------------------------------------------

	def visit_var_statement(self, stmt: VarStatement) -> None:
		value = UNDEFINED
		if stmt.initializer is not None:
			value = self.evaluate(stmt.initializer)
		self.environment.define(stmt.name.lexeme, value)

	def visit_print_statement(self, stmt: PrintStatement) -> None:
		value = self.evaluate(stmt.expression)
		self._write(stringify(value) + "\n")

	def visit_if_statement(self, stmt: IfStatement) -> None:
		if is_truthy(self.evaluate(stmt.condition)):
			self._execute(stmt.then_branch)
		elif stmt.else_branch is not None:
			self._execute(stmt.else_branch)

	def visit_block_statement(self, stmt: BlockStatement) -> None:
		for inner in stmt.statements:
			self._execute(inner)

	def visit_expression_statement(self, stmt: ExpressionStatement) -> None:
		self.evaluate(stmt.expression)

	def visit_import_statement(self, stmt: ImportStatement) -> None:
		logger.debug("Ignoring import of %r at line %d", stmt.filename_value, stmt.line)

	# Expressions --------------------------------------------------------------

	def visit_literal_expression(self, expr: LiteralExpression) -> Any:
		return expr.value

	def visit_variable_expression(self, expr: VariableExpression) -> Any:
		return self.environment.get(expr.name.lexeme, expr.name)

	def visit_assign_expression(self, expr: AssignExpression) -> Any:
		value = self.evaluate(expr.value)
		self.environment.assign(expr.name.lexeme, value, expr.name)
		return value

	def visit_grouping_expression(self, expr: GroupingExpression) -> Any:
		return self.evaluate(expr.expression)

	def visit_unary_expression(self, expr: UnaryExpression) -> Any:
		operand = self.evaluate(expr.operand)
		op = expr.operator
		if op.type == TokenType.MINUS:
			if not is_number(operand):
				raise TypeMismatchFault(f"Operand of '-' must be a number, got {type_name(operand)}", op)
			return -operand
		if op.type == TokenType.NOT:
			return not is_truthy(operand)
		raise StructuralFault(f"Unknown unary operator '{op.lexeme}'", op)

	def visit_binary_expression(self, expr: BinaryExpression) -> Any:
		# Left-associative chains nest down the left side; walk that spine in a
		# loop so long chains do not grow the stack.
		chain: List[BinaryExpression] = []
		node: Any = expr
		while isinstance(node, BinaryExpression):
			chain.append(node)
			node = node.left
		value = self.evaluate(node)
		for current in reversed(chain):
			value = self._combine(current, value)
		return value

	def _combine(self, expr: BinaryExpression, left: Any) -> Any:
		op = expr.operator
		if op.type == TokenType.AND:
			if not is_truthy(left):
				return False
			return is_truthy(self.evaluate(expr.right))
		if op.type == TokenType.OR:
			if is_truthy(left):
				return True
			return is_truthy(self.evaluate(expr.right))

		right = self.evaluate(expr.right)

		if op.type == TokenType.PLUS:
			if is_number(left) and is_number(right):
				return left + right
			if is_text(left) and is_text(right):
				return left + right
			raise TypeMismatchFault(f"Operands of '+' must be two numbers or two texts, got {type_name(left)} and {type_name(right)}", op)
		if op.type == TokenType.MINUS:
			self._check_numbers(op, left, right)
			return left - right
		if op.type == TokenType.MULTIPLY:
			self._check_numbers(op, left, right)
			return left * right
		if op.type == TokenType.DIVIDE:
			self._check_numbers(op, left, right)
			if right == 0:
				raise DivisionByZeroFault("Division by zero", op)
			if isinstance(left, int) and isinstance(right, int) and left % right == 0:
				return left // right
			return left / right
		if op.type == TokenType.MOD:
			self._check_numbers(op, left, right)
			if right == 0:
				raise DivisionByZeroFault("Modulo by zero", op)
			# truncated remainder: the sign follows the dividend
			if isinstance(left, int) and isinstance(right, int):
				remainder = abs(left) % abs(right)
				return -remainder if left < 0 else remainder
			return normalize_number(math.fmod(left, right))

		if op.type in NUMERIC_COMPARISONS:
			self._check_numbers(op, left, right)
			return NUMERIC_COMPARISONS[op.type](left, right)
		if op.type in (TokenType.EQUAL, TokenType.IS_EQUAL_TO):
			return values_equal(left, right)
		if op.type in (TokenType.NOT_EQUAL, TokenType.IS_NOT_EQUAL_TO):
			return not values_equal(left, right)

		raise StructuralFault(f"Unknown binary operator '{op.lexeme}'", op)

	def visit_call_expression(self, expr: CallExpression) -> Any:
		callee = expr.callee
		fn = self.functions.get(callee.lexeme.casefold())
		if fn is None:
			raise NameResolutionFault(f"Unknown function '{callee.lexeme}'", callee)
		arguments: List[Any] = [self.evaluate(arg) for arg in expr.arguments]
		try:
			result = fn(*arguments)
		except RuntimeFault:
			raise
		except (TypeError, ValueError, ArithmeticError) as exc:
			raise TypeMismatchFault(f"{callee.lexeme}(): {exc}", callee) from exc
		return UNDEFINED if result is None else result

	def _check_numbers(self, op: Token, left: Any, right: Any) -> None:
		if is_number(left) and is_number(right):
			return
		raise TypeMismatchFault(f"Operands of '{op.lexeme}' must be numbers, got {type_name(left)} and {type_name(right)}", op)


def sink_writer(output: OutputSink) -> Callable[[str], Any]:
	write = getattr(output, "write", None)
	if callable(write):
		return write
	if callable(output):
		return output
	raise TypeError(f"Output sink must be a writable stream or a callable, got {type(output).__name__}")


def execute(statements: Sequence[Statement], output: Optional[OutputSink] = None) -> Environment:
	return Interpreter(output).execute(statements)
