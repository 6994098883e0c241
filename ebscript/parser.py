"""Recursive-descent parser for EBS2.

Expressions are parsed by precedence climbing, weakest to tightest:
assignment, or, and, equality, comparison, term (+ -), factor (* / mod),
unary, call/primary. A syntax error records one :class:`ParseError`, then the
parser discards tokens up to the next safe restart point and carries on, so a
single run reports every independent error.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .ast import (
	AssignExpression,
	BinaryExpression,
	BlockStatement,
	CallExpression,
	Expression,
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
)
from .cache import ParseCache, ParseResult
from .tokens import STATEMENT_KEYWORDS, TYPE_NAMES, Token, TokenType

CONTEXT_WIDTH = 80

# Nested groups, unary operators, assignments and blocks; each level costs
# a stack of parser frames.
MAX_NESTING_DEPTH = 40

NAME_TYPES = (TokenType.IDENTIFIER, TokenType.BUILTIN_FUNCTION)

EQUALITY_OPERATORS = (
	TokenType.EQUAL,
	TokenType.NOT_EQUAL,
	TokenType.IS_EQUAL_TO,
	TokenType.IS_NOT_EQUAL_TO,
)

COMPARISON_OPERATORS = (
	TokenType.LESS_THAN,
	TokenType.GREATER_THAN,
	TokenType.LESS_EQUAL,
	TokenType.GREATER_EQUAL,
	TokenType.IS_LESS_THAN,
	TokenType.IS_GREATER_THAN,
	TokenType.IS_LESS_EQUAL,
	TokenType.IS_GREATER_EQUAL,
)


class ParseErrorKind(Enum):
	UNEXPECTED_TOKEN = auto()
	MISSING_TOKEN = auto()
	INVALID_STRUCTURE = auto()
	INVALID_EXPRESSION = auto()
	UNEXPECTED_EOF = auto()
	OTHER = auto()


@dataclass(frozen=True)
class ParseError:
	message: str
	token: Token
	kind: ParseErrorKind
	context: str

	@property
	def line(self) -> int:
		return self.token.line

	@property
	def column(self) -> int:
		return self.token.column

	@property
	def lexeme(self) -> str:
		return self.token.lexeme

	def __str__(self) -> str:
		return f"[Line {self.line}, Column {self.column}] {self.kind.name}: {self.message} at '{self.lexeme}'"

	def detailed_report(self) -> str:
		return (
			f"Parse Error: {self.kind.name}\n"
			f"  Location: Line {self.line}, Column {self.column}\n"
			f"  Message: {self.message}\n"
			f"  Context: {self.context}\n"
			f"  Token: {self.token.type.name} ('{self.token.lexeme}')\n"
		)


class ParserException(Exception):
	"""Unwinds a failed statement back to the synchronization point."""

	def __init__(self, error: ParseError) -> None:
		super().__init__(str(error))
		self.error = error


class TokenCursor:
	"""Read position over a token list; one per parse attempt."""

	def __init__(self, tokens: Sequence[Token]) -> None:
		self.tokens = tokens
		self.position = 0

	def peek(self) -> Token:
		return self.tokens[self.position]

	def peek_next(self) -> Token:
		if self.position + 1 >= len(self.tokens):
			return self.tokens[-1]
		return self.tokens[self.position + 1]

	def previous(self) -> Token:
		return self.tokens[self.position - 1]

	def advance(self) -> Token:
		if not self.is_at_end():
			self.position += 1
		return self.previous()

	def check(self, kind: TokenType) -> bool:
		if self.is_at_end():
			return False
		return self.peek().type == kind

	def match(self, *kinds: TokenType) -> bool:
		for kind in kinds:
			if self.check(kind):
				self.advance()
				return True
		return False

	def is_at_end(self) -> bool:
		return self.peek().type == TokenType.EOF


class Parser:
	def __init__(self, tokens: Sequence[Token], cache: Optional[ParseCache] = None) -> None:
		tokens = list(tokens)
		if not tokens or tokens[-1].type != TokenType.EOF:
			last = tokens[-1] if tokens else None
			line = last.line if last else 1
			offset = last.end_offset if last else 0
			tokens.append(Token(TokenType.EOF, "", None, line, (last.column + len(last.lexeme)) if last else 1, offset, offset))
		self.tokens: List[Token] = tokens
		self.cache = cache
		self.errors: List[ParseError] = []
		self._cursor = TokenCursor(self.tokens)
		self._block_depth = 0
		self._depth = 0

	@property
	def had_error(self) -> bool:
		return bool(self.errors)

	def parse(self, cache_key: Optional[str] = None) -> Tuple[List[Statement], List[ParseError]]:
		if cache_key is not None and self.cache is not None:
			cached = self.cache.get(cache_key)
			if cached is not None:
				self.errors = list(cached.errors)
				return list(cached.statements), list(cached.errors)

		self._cursor = TokenCursor(self.tokens)
		self._block_depth = 0
		self._depth = 0
		self.errors = []
		imports: List[Statement] = []
		body: List[Statement] = []
		while not self._cursor.is_at_end():
			stmt = self._declaration()
			if stmt is None:
				continue
			if isinstance(stmt, ImportStatement):
				if body:
					self._report(stmt.keyword, "Import statements must appear before any other statements", ParseErrorKind.INVALID_STRUCTURE)
				imports.append(stmt)
			else:
				body.append(stmt)
		statements = imports + body

		if cache_key is not None and self.cache is not None:
			self.cache.put(cache_key, ParseResult(tuple(statements), tuple(self.errors), tuple(self.tokens)))
		return statements, list(self.errors)

	# Statements ---------------------------------------------------------------

	def _declaration(self) -> Optional[Statement]:
		start = self._cursor.position
		try:
			return self._statement()
		except ParserException as exc:
			self._synchronize(start)
			return None

	def _statement(self) -> Statement:
		with self._nested("Statements nested too deeply"):
			return self._statement_body()

	def _statement_body(self) -> Statement:
		cursor = self._cursor
		if cursor.match(TokenType.IMPORT):
			return self._import_statement()
		if cursor.match(TokenType.VAR, TokenType.VARIABLE):
			return self._var_statement()
		if cursor.match(TokenType.PRINT):
			return self._print_statement()
		if cursor.match(TokenType.IF):
			return self._if_statement()
		if cursor.match(TokenType.THEN, TokenType.ELSE):
			token = cursor.previous()
			raise self._error(token, f"'{token.lexeme}' without a matching 'if'", ParseErrorKind.INVALID_STRUCTURE)
		if cursor.match(TokenType.END):
			token = cursor.previous()
			cursor.match(TokenType.IF)
			raise self._error(token, "'end' without a matching block", ParseErrorKind.INVALID_STRUCTURE)
		return ExpressionStatement(self._expression())

	def _import_statement(self) -> Statement:
		keyword = self._cursor.previous()
		filename = self._consume(TokenType.TEXT, "Expected file name string after 'import'")
		return ImportStatement(keyword, filename)

	def _var_statement(self) -> Statement:
		keyword = self._cursor.previous()
		name = self._consume_name(f"Expected variable name after '{keyword.lexeme}'")
		type_name = None
		if self._cursor.match(TokenType.AS):
			type_name = self._consume_type("Expected type name after 'as'")
		initializer = None
		if self._cursor.match(TokenType.ASSIGN):
			initializer = self._expression()
		return VarStatement(keyword, name, type_name, initializer)

	def _print_statement(self) -> Statement:
		keyword = self._cursor.previous()
		return PrintStatement(keyword, self._expression())

	def _if_statement(self) -> IfStatement:
		cursor = self._cursor
		keyword = cursor.previous()
		condition = self._expression()
		then_token = self._consume(TokenType.THEN, "Expected 'then' after if condition")
		if not cursor.is_at_end() and cursor.peek().line > then_token.line:
			return self._if_block(keyword, condition, then_token)

		then_branch = self._statement()
		else_branch = None
		if cursor.match(TokenType.ELSE):
			else_branch = self._statement()
		end_token = None
		# Optional trailing "end if"; inside a block only on the same line, the
		# block's own "end if" belongs to the enclosing if.
		if cursor.check(TokenType.END) and cursor.peek_next().type == TokenType.IF:
			if self._block_depth == 0 or cursor.peek().line == keyword.line:
				end_token = cursor.advance()
				cursor.advance()
		return IfStatement(keyword, condition, then_branch, else_branch, end_token)

	def _if_block(self, keyword: Token, condition: Expression, then_token: Token) -> IfStatement:
		cursor = self._cursor
		then_branch = self._block(then_token, (TokenType.ELSE, TokenType.END))
		else_branch: Optional[Statement] = None
		if cursor.match(TokenType.ELSE):
			else_token = cursor.previous()
			if cursor.check(TokenType.IF) and cursor.peek().line == else_token.line:
				cursor.advance()
				nested = self._if_statement()
				if nested.end_token is not None:
					return IfStatement(keyword, condition, then_branch, nested, nested.end_token)
				else_branch = nested
			else:
				else_branch = self._block(else_token, (TokenType.END,))
		end_token = self._consume(TokenType.END, "Expected 'end if' to close 'if' block")
		self._consume(TokenType.IF, "Expected 'if' after 'end'")
		return IfStatement(keyword, condition, then_branch, else_branch, end_token)

	def _block(self, start: Token, terminators: Tuple[TokenType, ...]) -> BlockStatement:
		cursor = self._cursor
		statements: List[Statement] = []
		self._block_depth += 1
		try:
			while not cursor.is_at_end() and not any(cursor.check(kind) for kind in terminators):
				stmt = self._declaration()
				if stmt is None:
					continue
				if isinstance(stmt, ImportStatement):
					self._report(stmt.keyword, "Import statements are only allowed at the top level", ParseErrorKind.INVALID_STRUCTURE)
					continue
				statements.append(stmt)
		finally:
			self._block_depth -= 1
		return BlockStatement(start, tuple(statements))

	# Expressions --------------------------------------------------------------

	def _expression(self) -> Expression:
		with self._nested("Expression nested too deeply"):
			return self._assignment()

	def _assignment(self) -> Expression:
		expr = self._or()
		if self._cursor.match(TokenType.ASSIGN):
			equals = self._cursor.previous()
			value = self._expression()
			if isinstance(expr, VariableExpression):
				return AssignExpression(expr.name, value)
			raise self._error(equals, "Invalid assignment target", ParseErrorKind.INVALID_STRUCTURE)
		return expr

	def _or(self) -> Expression:
		return self._left_associative(self._and, (TokenType.OR,))

	def _and(self) -> Expression:
		return self._left_associative(self._equality, (TokenType.AND,))

	def _equality(self) -> Expression:
		return self._left_associative(self._comparison, EQUALITY_OPERATORS)

	def _comparison(self) -> Expression:
		return self._left_associative(self._term, COMPARISON_OPERATORS)

	def _term(self) -> Expression:
		return self._left_associative(self._factor, (TokenType.PLUS, TokenType.MINUS))

	def _factor(self) -> Expression:
		return self._left_associative(self._unary, (TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MOD))

	def _left_associative(self, operand: Callable[[], Expression], operators: Tuple[TokenType, ...]) -> Expression:
		expr = operand()
		while self._cursor.match(*operators):
			operator = self._cursor.previous()
			right = operand()
			expr = BinaryExpression(expr, operator, right)
		return expr

	def _unary(self) -> Expression:
		if self._cursor.match(TokenType.MINUS, TokenType.NOT):
			operator = self._cursor.previous()
			with self._nested("Expression nested too deeply"):
				return UnaryExpression(operator, self._unary())
		return self._primary()

	def _primary(self) -> Expression:
		cursor = self._cursor
		if cursor.match(TokenType.NUMBER, TokenType.TEXT):
			token = cursor.previous()
			return LiteralExpression(token, token.literal)
		if cursor.match(TokenType.TRUE):
			return LiteralExpression(cursor.previous(), True)
		if cursor.match(TokenType.FALSE):
			return LiteralExpression(cursor.previous(), False)
		if cursor.match(*NAME_TYPES):
			name = cursor.previous()
			# a call's "(" must sit on the callee's line
			if cursor.check(TokenType.LPAREN) and cursor.peek().line == name.line:
				cursor.advance()
				return self._finish_call(name)
			return VariableExpression(name)
		if cursor.match(TokenType.LPAREN):
			left = cursor.previous()
			expr = self._expression()
			right = self._consume(TokenType.RPAREN, "Expected ')' after expression")
			return GroupingExpression(left, expr, right)
		token = cursor.peek()
		kind = ParseErrorKind.UNEXPECTED_EOF if token.type == TokenType.EOF else ParseErrorKind.INVALID_EXPRESSION
		raise self._error(token, "Expected expression", kind)

	def _finish_call(self, callee: Token) -> Expression:
		arguments: List[Expression] = []
		if not self._cursor.check(TokenType.RPAREN):
			arguments.append(self._expression())
			while self._cursor.match(TokenType.COMMA):
				arguments.append(self._expression())
		right = self._consume(TokenType.RPAREN, "Expected ')' after arguments")
		return CallExpression(callee, tuple(arguments), right)

	# Helpers ------------------------------------------------------------------

	def _consume(self, kind: TokenType, message: str) -> Token:
		if self._cursor.check(kind):
			return self._cursor.advance()
		raise self._expected(message)

	def _consume_name(self, message: str) -> Token:
		if self._cursor.match(*NAME_TYPES):
			return self._cursor.previous()
		raise self._expected(message)

	def _consume_type(self, message: str) -> Token:
		if self._cursor.match(*TYPE_NAMES):
			return self._cursor.previous()
		raise self._expected(message)

	def _expected(self, message: str) -> ParserException:
		token = self._cursor.peek()
		kind = ParseErrorKind.MISSING_TOKEN if token.type == TokenType.EOF else ParseErrorKind.UNEXPECTED_TOKEN
		return self._error(token, message, kind)

	def _error(self, token: Token, message: str, kind: ParseErrorKind) -> ParserException:
		return ParserException(self._report(token, message, kind))

	def _report(self, token: Token, message: str, kind: ParseErrorKind) -> ParseError:
		error = ParseError(message, token, kind, self._context(token))
		self.errors.append(error)
		return error

	def _context(self, token: Token) -> str:
		line = token.line
		if token.type == TokenType.EOF and self._cursor.position > 0:
			line = self._cursor.previous().line
		lexemes = [t.lexeme for t in self.tokens if t.line == line and t.type != TokenType.EOF]
		snippet = " ".join(lexemes) or token.lexeme
		if len(snippet) > CONTEXT_WIDTH:
			snippet = snippet[: CONTEXT_WIDTH - 3] + "..."
		return snippet

	@contextmanager
	def _nested(self, message: str) -> Iterator[None]:
		self._depth += 1
		try:
			if self._depth > MAX_NESTING_DEPTH:
				raise self._error(self._cursor.peek(), message, ParseErrorKind.INVALID_STRUCTURE)
			yield
		finally:
			self._depth -= 1

	def _synchronize(self, start: int) -> None:
		cursor = self._cursor
		if cursor.position == start:
			cursor.advance()
		# the statement ends with the line of the last token it consumed; the
		# error token may already sit on the next line
		line = cursor.previous().line
		while not cursor.is_at_end():
			if cursor.previous().type == TokenType.SEMICOLON:
				return
			token = cursor.peek()
			if token.type in STATEMENT_KEYWORDS or token.line > line:
				return
			cursor.advance()


def parse(tokens: Sequence[Token], cache: Optional[ParseCache] = None, cache_key: Optional[str] = None) -> Tuple[List[Statement], List[ParseError]]:
	return Parser(tokens, cache).parse(cache_key)
