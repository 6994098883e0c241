"""Token definitions for the EBS2 language: token types, keywords and built-in names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class TokenType(Enum):
	# Special tokens
	EOF = auto()
	NEWLINE = auto()
	WHITESPACE = auto()
	COMMENT = auto()

	# Literals
	NUMBER = auto()
	TEXT = auto()
	TRUE = auto()
	FALSE = auto()

	# Names
	IDENTIFIER = auto()
	BUILTIN_FUNCTION = auto()

	# Keywords (beginner level)
	PROGRAM = auto()
	END = auto()
	VAR = auto()
	VARIABLE = auto()
	AS = auto()
	IS = auto()
	IF = auto()
	THEN = auto()
	ELSE = auto()
	REPEAT = auto()
	TIMES = auto()
	FOR = auto()
	EACH = auto()
	IN = auto()
	TO = auto()
	LOOP = auto()
	CALL = auto()
	WITH = auto()
	AND = auto()
	RETURN = auto()
	PRINT = auto()
	LOG = auto()
	HIDE = auto()
	ASK = auto()
	SCREEN = auto()
	BUTTON = auto()
	LABEL = auto()
	TEXTBOX = auto()
	ARRAY = auto()
	TEXT_TYPE = auto()
	NUMBER_TYPE = auto()
	FLAG = auto()
	CONST = auto()
	CONSTANT = auto()
	INDICATOR = auto()
	RECORD = auto()
	TYPE = auto()
	FUNCTION = auto()
	PROCEDURE = auto()

	# Keywords (advanced)
	TRY = auto()
	CATCH = auto()
	THROW = auto()
	IMPORT = auto()
	FROM = auto()
	EXPORT = auto()
	MAP = auto()
	JSON = auto()
	WHILE = auto()
	UNTIL = auto()
	BREAK = auto()
	CONTINUE = auto()
	SWITCH = auto()
	CASE = auto()
	DEFAULT = auto()
	LET = auto()
	ASYNC = auto()
	AWAIT = auto()
	CLASS = auto()
	EXTENDS = auto()
	NEW = auto()
	DO = auto()
	DOWN = auto()
	STEP = auto()
	BY = auto()
	TYPEOF = auto()
	DATE = auto()

	# Arithmetic
	PLUS = auto()
	MINUS = auto()
	MULTIPLY = auto()
	DIVIDE = auto()
	MOD = auto()
	INCREMENT = auto()
	DECREMENT = auto()

	# Comparison
	EQUAL = auto()
	NOT_EQUAL = auto()
	LESS_THAN = auto()
	GREATER_THAN = auto()
	LESS_EQUAL = auto()
	GREATER_EQUAL = auto()

	# Logical
	OR = auto()
	NOT = auto()

	ASSIGN = auto()

	# Delimiters
	LPAREN = auto()
	RPAREN = auto()
	LBRACE = auto()
	RBRACE = auto()
	LBRACKET = auto()
	RBRACKET = auto()
	COMMA = auto()
	SEMICOLON = auto()
	COLON = auto()
	DOT = auto()
	RANGE = auto()
	ARROW = auto()
	QUESTION = auto()

	# Natural-language comparison phrases, collapsed into one token each
	IS_EQUAL_TO = auto()
	IS_NOT_EQUAL_TO = auto()
	IS_GREATER_THAN = auto()
	IS_LESS_THAN = auto()
	IS_GREATER_EQUAL = auto()
	IS_LESS_EQUAL = auto()

	ILLEGAL = auto()


KEYWORDS: Dict[str, TokenType] = {
	"program": TokenType.PROGRAM,
	"end": TokenType.END,
	"var": TokenType.VAR,
	"variable": TokenType.VARIABLE,
	"as": TokenType.AS,
	"is": TokenType.IS,
	"if": TokenType.IF,
	"then": TokenType.THEN,
	"else": TokenType.ELSE,
	"repeat": TokenType.REPEAT,
	"times": TokenType.TIMES,
	"for": TokenType.FOR,
	"each": TokenType.EACH,
	"in": TokenType.IN,
	"to": TokenType.TO,
	"loop": TokenType.LOOP,
	"call": TokenType.CALL,
	"with": TokenType.WITH,
	"and": TokenType.AND,
	"return": TokenType.RETURN,
	"print": TokenType.PRINT,
	"log": TokenType.LOG,
	"hide": TokenType.HIDE,
	"ask": TokenType.ASK,
	"screen": TokenType.SCREEN,
	"button": TokenType.BUTTON,
	"label": TokenType.LABEL,
	"textbox": TokenType.TEXTBOX,
	"array": TokenType.ARRAY,
	"text": TokenType.TEXT_TYPE,
	"number": TokenType.NUMBER_TYPE,
	"flag": TokenType.FLAG,
	"true": TokenType.TRUE,
	"false": TokenType.FALSE,
	"const": TokenType.CONST,
	"constant": TokenType.CONSTANT,
	"indicator": TokenType.INDICATOR,
	"record": TokenType.RECORD,
	"type": TokenType.TYPE,
	"function": TokenType.FUNCTION,
	"procedure": TokenType.PROCEDURE,
	"try": TokenType.TRY,
	"catch": TokenType.CATCH,
	"throw": TokenType.THROW,
	"import": TokenType.IMPORT,
	"from": TokenType.FROM,
	"export": TokenType.EXPORT,
	"map": TokenType.MAP,
	"json": TokenType.JSON,
	"while": TokenType.WHILE,
	"until": TokenType.UNTIL,
	"break": TokenType.BREAK,
	"continue": TokenType.CONTINUE,
	"switch": TokenType.SWITCH,
	"case": TokenType.CASE,
	"default": TokenType.DEFAULT,
	"let": TokenType.LET,
	"async": TokenType.ASYNC,
	"await": TokenType.AWAIT,
	"class": TokenType.CLASS,
	"extends": TokenType.EXTENDS,
	"new": TokenType.NEW,
	"do": TokenType.DO,
	"down": TokenType.DOWN,
	"step": TokenType.STEP,
	"by": TokenType.BY,
	"typeof": TokenType.TYPEOF,
	"date": TokenType.DATE,
	"or": TokenType.OR,
	"not": TokenType.NOT,
	"mod": TokenType.MOD,
}


# Lower-cased; keywords win over built-ins of the same name.
BUILTIN_FUNCTIONS: FrozenSet[str] = frozenset(
	name.lower()
	for name in (
		# Type conversion
		"toText", "toNumber", "toInt", "toFlag",
		# Text operations
		"toUpper", "toLower", "toUpperCase", "toLowerCase",
		"trim", "trimLeft", "trimRight", "trimStart", "trimEnd",
		"substring", "substr", "replace",
		"contains", "indexOf", "lastIndexOf",
		"startsWith", "endsWith", "charAt",
		"padLeft", "padRight", "reverse",
		# Math
		"abs", "ceil", "floor", "round", "sqrt", "pow",
		"min", "max",
	)
)


# Tried in order after the word "is"; longer phrases sharing a prefix come first.
COMPARISON_PHRASES: List[Tuple[Tuple[str, ...], TokenType]] = [
	(("equal", "to"), TokenType.IS_EQUAL_TO),
	(("not", "equal", "to"), TokenType.IS_NOT_EQUAL_TO),
	(("greater", "than", "or", "equal", "to"), TokenType.IS_GREATER_EQUAL),
	(("less", "than", "or", "equal", "to"), TokenType.IS_LESS_EQUAL),
	(("greater", "than"), TokenType.IS_GREATER_THAN),
	(("less", "than"), TokenType.IS_LESS_THAN),
]


# Tokens that may start a statement; the parser resynchronizes on these.
STATEMENT_KEYWORDS: FrozenSet[TokenType] = frozenset(
	{
		TokenType.PROGRAM,
		TokenType.VAR,
		TokenType.VARIABLE,
		TokenType.IF,
		TokenType.WHILE,
		TokenType.FOR,
		TokenType.REPEAT,
		TokenType.FUNCTION,
		TokenType.PROCEDURE,
		TokenType.RETURN,
		TokenType.PRINT,
		TokenType.END,
		TokenType.ELSE,
		TokenType.IMPORT,
	}
)


TYPE_NAMES: FrozenSet[TokenType] = frozenset(
	{
		TokenType.TEXT_TYPE,
		TokenType.NUMBER_TYPE,
		TokenType.FLAG,
		TokenType.DATE,
		TokenType.ARRAY,
		TokenType.RECORD,
		TokenType.JSON,
		TokenType.IDENTIFIER,
	}
)


@dataclass(frozen=True)
class Token:
	type: TokenType
	lexeme: str
	literal: Optional[Any]
	line: int
	column: int
	start_offset: int
	end_offset: int

	def __str__(self) -> str:
		return f"{self.type.name} '{self.lexeme}' ({self.line}:{self.column})"

	@property
	def is_keyword(self) -> bool:
		return self.type in _KEYWORD_TYPES


_KEYWORD_TYPES: FrozenSet[TokenType] = frozenset(KEYWORDS.values()) - {TokenType.TRUE, TokenType.FALSE}
