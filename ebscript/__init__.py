"""EBS2: a small natural-language scripting language with a tree-walking interpreter."""

__version__ = "2.0.0"

from .cache import ParseCache, ParseResult
from .engine import CompilationArtifacts, RunArtifacts, ScriptEngine, summarize_errors
from .environment import Environment
from .errors import DivisionByZeroFault, NameResolutionFault, RuntimeFault, StructuralFault, TypeMismatchFault
from .interpreter import Interpreter
from .lexer import Lexer, LexerError
from .parser import ParseError, ParseErrorKind, Parser
from .printer import AstPrinter
from .tokens import Token, TokenType
from .values import UNDEFINED

__all__ = [
	"__version__",
	"AstPrinter",
	"CompilationArtifacts",
	"DivisionByZeroFault",
	"Environment",
	"Interpreter",
	"Lexer",
	"LexerError",
	"NameResolutionFault",
	"ParseCache",
	"ParseError",
	"ParseErrorKind",
	"ParseResult",
	"Parser",
	"RunArtifacts",
	"RuntimeFault",
	"ScriptEngine",
	"StructuralFault",
	"Token",
	"TokenType",
	"TypeMismatchFault",
	"UNDEFINED",
	"summarize_errors",
]
