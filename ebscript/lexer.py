"""Lexical analysis for EBS2.

The lexer never raises on bad input. Illegal characters and unterminated
strings are recorded as :class:`LexerError` values and a recovery token is
emitted in their place, so the token stream always reaches ``EOF``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from .tokens import BUILTIN_FUNCTIONS, COMPARISON_PHRASES, KEYWORDS, Token, TokenType


@dataclass(frozen=True)
class LexerError:
	message: str
	line: int
	column: int

	def __str__(self) -> str:
		return f"[Line {self.line}, Column {self.column}] {self.message}"


@dataclass
class SourceCursor:
	"""Scan position owned by a single lexer run."""

	index: int = 0
	line: int = 1
	column: int = 1

	def snapshot(self) -> "SourceCursor":
		return replace(self)


SINGLE_CHAR_TOKENS = {
	"(": TokenType.LPAREN,
	")": TokenType.RPAREN,
	"{": TokenType.LBRACE,
	"}": TokenType.RBRACE,
	"[": TokenType.LBRACKET,
	"]": TokenType.RBRACKET,
	",": TokenType.COMMA,
	";": TokenType.SEMICOLON,
	":": TokenType.COLON,
	"?": TokenType.QUESTION,
	"*": TokenType.MULTIPLY,
}

# first char -> ordered (second char, type) candidates, then the single-char fallback
COMPOUND_TOKENS = {
	".": ((".", TokenType.RANGE),),
	"+": (("+", TokenType.INCREMENT),),
	"-": (("-", TokenType.DECREMENT),),
	"=": (("=", TokenType.EQUAL), (">", TokenType.ARROW)),
	"!": (("=", TokenType.NOT_EQUAL),),
	"<": (("=", TokenType.LESS_EQUAL), (">", TokenType.NOT_EQUAL)),
	">": (("=", TokenType.GREATER_EQUAL),),
	"|": (("|", TokenType.OR),),
	"&": (("&", TokenType.AND),),
}

COMPOUND_FALLBACK = {
	".": TokenType.DOT,
	"+": TokenType.PLUS,
	"-": TokenType.MINUS,
	"=": TokenType.ASSIGN,
	"!": TokenType.NOT,
	"<": TokenType.LESS_THAN,
	">": TokenType.GREATER_THAN,
	"|": TokenType.OR,
	"&": TokenType.AND,
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'"}


class Lexer:
	def __init__(self, source: str) -> None:
		self.source = source
		self.length = len(source)
		self.tokens: List[Token] = []
		self.errors: List[LexerError] = []
		self._cursor = SourceCursor()
		self._start = SourceCursor()

	def scan_tokens(self) -> Tuple[List[Token], List[LexerError]]:
		self.tokens = []
		self.errors = []
		self._cursor = SourceCursor()
		while not self._is_eof():
			self._start = self._cursor.snapshot()
			self._scan_token()
		self._start = self._cursor.snapshot()
		self.tokens.append(Token(TokenType.EOF, "", None, self._cursor.line, self._cursor.column, self._cursor.index, self._cursor.index))
		return self.tokens, self.errors

	@property
	def had_error(self) -> bool:
		return bool(self.errors)

	def _scan_token(self) -> None:
		ch = self._advance()
		if ch in " \t\r":
			return
		if ch == "\n":
			self._newline()
			return
		if ch == "/":
			if self._match("/"):
				self._consume_comment()
			else:
				self._add_token(TokenType.DIVIDE)
			return
		if ch in SINGLE_CHAR_TOKENS:
			self._add_token(SINGLE_CHAR_TOKENS[ch])
			return
		if ch in COMPOUND_TOKENS:
			for second, kind in COMPOUND_TOKENS[ch]:
				if self._match(second):
					self._add_token(kind)
					return
			self._add_token(COMPOUND_FALLBACK[ch])
			return
		if ch in "\"'":
			self._consume_string(ch)
			return
		if _is_digit(ch):
			self._consume_number()
			return
		if _is_alpha(ch):
			self._consume_identifier()
			return
		self._error(f"Unexpected character: '{ch}'")
		self._add_token(TokenType.ILLEGAL)

	def _consume_comment(self) -> None:
		while not self._is_eof() and self._peek() != "\n":
			self._advance()

	def _consume_string(self, quote: str) -> None:
		value: List[str] = []
		while not self._is_eof() and self._peek() != quote:
			ch = self._advance()
			if ch == "\n":
				self._newline()
				value.append(ch)
			elif ch == "\\":
				if self._is_eof():
					break
				esc = self._advance()
				value.append(ESCAPES.get(esc, esc))
			else:
				value.append(ch)
		if self._is_eof():
			self._error("Unterminated string")
			self._add_token(TokenType.TEXT, "".join(value))
			return
		self._advance()  # closing quote
		self._add_token(TokenType.TEXT, "".join(value))

	def _consume_number(self) -> None:
		while _is_digit(self._peek()):
			self._advance()
		if self._peek() == "." and _is_digit(self._peek_next()):
			self._advance()
			while _is_digit(self._peek()):
				self._advance()
		text = self.source[self._start.index : self._cursor.index]
		value: Any = float(text) if "." in text else int(text)
		self._add_token(TokenType.NUMBER, value)

	def _consume_identifier(self) -> None:
		while _is_alnum(self._peek()):
			self._advance()
		text = self.source[self._start.index : self._cursor.index]
		lowered = text.lower()
		if lowered == "is":
			for words, kind in COMPARISON_PHRASES:
				if self._try_phrase(words):
					self._add_token(kind)
					return
		kind = KEYWORDS.get(lowered)
		if kind is None:
			kind = TokenType.BUILTIN_FUNCTION if lowered in BUILTIN_FUNCTIONS else TokenType.IDENTIFIER
		if kind == TokenType.TRUE:
			self._add_token(kind, True)
		elif kind == TokenType.FALSE:
			self._add_token(kind, False)
		else:
			self._add_token(kind)

	def _try_phrase(self, words: Tuple[str, ...]) -> bool:
		saved = self._cursor.snapshot()
		for word in words:
			# at least one blank must separate the words of a phrase
			if self._peek() not in (" ", "\t"):
				self._cursor = saved
				return False
			while self._peek() in (" ", "\t"):
				self._advance()
			word_start = self._cursor.index
			while _is_alnum(self._peek()):
				self._advance()
			if self.source[word_start : self._cursor.index].lower() != word:
				self._cursor = saved
				return False
		return True

	# Cursor helpers -----------------------------------------------------------

	def _advance(self) -> str:
		ch = self.source[self._cursor.index]
		self._cursor.index += 1
		self._cursor.column += 1
		return ch

	def _newline(self) -> None:
		self._cursor.line += 1
		self._cursor.column = 1

	def _match(self, expected: str) -> bool:
		if self._is_eof() or self.source[self._cursor.index] != expected:
			return False
		self._advance()
		return True

	def _peek(self) -> str:
		if self._is_eof():
			return ""
		return self.source[self._cursor.index]

	def _peek_next(self) -> str:
		if self._cursor.index + 1 >= self.length:
			return ""
		return self.source[self._cursor.index + 1]

	def _is_eof(self) -> bool:
		return self._cursor.index >= self.length

	def _add_token(self, kind: TokenType, literal: Optional[Any] = None) -> None:
		lexeme = self.source[self._start.index : self._cursor.index]
		self.tokens.append(Token(kind, lexeme, literal, self._start.line, self._start.column, self._start.index, self._cursor.index))

	def _error(self, message: str) -> None:
		self.errors.append(LexerError(message, self._start.line, self._start.column))


def scan_tokens(source: str) -> Tuple[List[Token], List[LexerError]]:
	return Lexer(source).scan_tokens()


def _is_digit(ch: str) -> bool:
	return ch != "" and "0" <= ch <= "9"


def _is_alpha(ch: str) -> bool:
	return ch != "" and (("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_")


def _is_alnum(ch: str) -> bool:
	return _is_alpha(ch) or _is_digit(ch)
