"""Command line entry point.

Usage:
    ebs2 [-v|-vv] run <file>
    ebs2 check <file>
    ebs2 tokens <file>
    ebs2 ast <file>
    ebs2 serve [--host HOST] [--port PORT]
    ebs2 console [file]

Lexer and parse errors go to stderr followed by the error summary and exit
status 1. A runtime fault prints ``Runtime error: ...`` and exits 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import AppSettings, ConfigError, load_settings
from .engine import CompilationArtifacts, ScriptEngine, summarize_errors
from .logs import configure_logging
from .printer import AstPrinter
from .tokens import TokenType

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="ebs2", description="EBS2 script interpreter")
	parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
	parser.add_argument("-v", "--verbose", action="count", default=0, help="increase log verbosity (can be repeated)")
	parser.add_argument("--config", metavar="FILE", help="JSON settings file (defaults to $EBS2_CONFIG)")
	sub = parser.add_subparsers(dest="command", required=True)

	run = sub.add_parser("run", help="run a script")
	run.add_argument("file")
	check = sub.add_parser("check", help="report lexer and parse errors without running")
	check.add_argument("file")
	tokens = sub.add_parser("tokens", help="print the token stream")
	tokens.add_argument("file")
	ast = sub.add_parser("ast", help="print the parsed syntax tree")
	ast.add_argument("file")

	serve = sub.add_parser("serve", help="start the HTTP API")
	serve.add_argument("--host", default=None)
	serve.add_argument("--port", type=int, default=None)

	console = sub.add_parser("console", help="open the desktop console")
	console.add_argument("file", nargs="?")
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	try:
		settings = load_settings(args.config)
	except ConfigError as exc:
		print(f"Error: {exc}", file=sys.stderr)
		return 2

	level = settings.log_level
	if args.verbose >= 2:
		level = "DEBUG"
	elif args.verbose == 1 and level != "DEBUG":
		level = "INFO"
	configure_logging(level)

	handler = COMMANDS[args.command]
	return handler(args, settings)


# Commands -------------------------------------------------------------------


def _cmd_run(args: argparse.Namespace, settings: AppSettings) -> int:
	source = _read_source(args.file)
	if source is None:
		return 1
	engine = ScriptEngine(settings.engine)
	result = engine.run(source, output=sys.stdout)
	if result.compilation.has_errors:
		_report_errors(result.compilation)
		return 1
	if result.runtime_error is not None:
		print(f"Runtime error: {result.runtime_error}", file=sys.stderr)
		return 1
	return 0


def _cmd_check(args: argparse.Namespace, settings: AppSettings) -> int:
	source = _read_source(args.file)
	if source is None:
		return 1
	artifacts = ScriptEngine(settings.engine).validate(source)
	if artifacts.has_errors:
		_report_errors(artifacts)
		return 1
	print(summarize_errors(0))
	return 0


def _cmd_tokens(args: argparse.Namespace, settings: AppSettings) -> int:
	source = _read_source(args.file)
	if source is None:
		return 1
	tokens, errors = ScriptEngine(settings.engine).tokenize(source)
	for token in tokens:
		if token.type == TokenType.EOF:
			continue
		print(f"{token.line}:{token.column}\t{token.type.name}\t{token.lexeme}")
	for err in errors:
		print(str(err), file=sys.stderr)
	return 1 if errors else 0


def _cmd_ast(args: argparse.Namespace, settings: AppSettings) -> int:
	source = _read_source(args.file)
	if source is None:
		return 1
	artifacts = ScriptEngine(settings.engine).compile(source)
	printer = AstPrinter()
	for stmt in artifacts.statements:
		print(printer.print(stmt))
	if artifacts.has_errors:
		_report_errors(artifacts)
		return 1
	return 0


def _cmd_serve(args: argparse.Namespace, settings: AppSettings) -> int:
	import uvicorn

	from webapp.main import create_app

	host = args.host or settings.server.host
	port = args.port or settings.server.port
	logger.info("Serving on %s:%d", host, port)
	uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
	return 0


def _cmd_console(args: argparse.Namespace, settings: AppSettings) -> int:
	from .console import launch

	source = None
	if args.file:
		source = _read_source(args.file)
		if source is None:
			return 1
	try:
		launch(settings, source)
	except RuntimeError as exc:
		print(f"Error: {exc}", file=sys.stderr)
		return 1
	return 0


COMMANDS = {
	"run": _cmd_run,
	"check": _cmd_check,
	"tokens": _cmd_tokens,
	"ast": _cmd_ast,
	"serve": _cmd_serve,
	"console": _cmd_console,
}


# Helpers --------------------------------------------------------------------


def _read_source(name: str) -> Optional[str]:
	path = Path(name)
	if not path.exists():
		print(f"Error: file {path} not found", file=sys.stderr)
		return None
	return path.read_text(encoding="utf-8")


def _report_errors(artifacts: CompilationArtifacts) -> None:
	if artifacts.lexer_errors:
		print("Lexer errors:", file=sys.stderr)
		for err in artifacts.lexer_errors:
			print(f"  {err}", file=sys.stderr)
	if artifacts.parse_errors:
		print("Parse errors:", file=sys.stderr)
		for err in artifacts.parse_errors:
			print(f"  {err}", file=sys.stderr)
	print(summarize_errors(artifacts.error_count), file=sys.stderr)
