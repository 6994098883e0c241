from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from ebscript import __version__
from ebscript.config import AppSettings, load_settings
from ebscript.engine import CompilationArtifacts, ScriptEngine, summarize_errors
from ebscript.printer import AstPrinter, to_outline
from ebscript.tokens import TokenType

logger = logging.getLogger(__name__)

APP_NAME = "EBS2 Script Interpreter"

STATIC_DIR = Path(__file__).parent / "static"


class ScriptRequest(BaseModel):
	# Optional so a missing field is answered like an empty one
	code: Optional[str] = None
	cache_key: Optional[str] = None


def _to_json(obj: Any, *, depth: int = 0, max_depth: int = 12) -> Any:
	"""Best-effort conversion of pipeline artifacts to JSON-safe structures."""
	if depth > max_depth:
		return {"_truncated": True}
	if obj is None:
		return None
	if isinstance(obj, (str, int, float, bool)):
		return obj
	if isinstance(obj, (list, tuple)):
		return [_to_json(x, depth=depth + 1, max_depth=max_depth) for x in obj]
	if isinstance(obj, dict):
		return {str(k): _to_json(v, depth=depth + 1, max_depth=max_depth) for k, v in obj.items()}
	if is_dataclass(obj):
		data: Dict[str, Any] = {"_type": obj.__class__.__name__}
		for k, v in obj.__dict__.items():
			data[k] = _to_json(v, depth=depth + 1, max_depth=max_depth)
		return data
	# Enums (Severity/TokenType/ParseErrorKind)
	if hasattr(obj, "name") and hasattr(obj, "value"):
		return getattr(obj, "name")
	return str(obj)


def _error_response(status_code: int, message: str) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _blank(code: Optional[str]) -> bool:
	return code is None or not code.strip()


def _diagnostics(art: CompilationArtifacts) -> list:
	return [
		{
			"severity": d.severity.name,
			"message": d.message,
			"line": d.line,
			"column": d.column,
			"length": d.length,
			"origin": d.origin,
			"kind": d.kind,
		}
		for d in art.diagnostics
	]


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
	settings = settings or load_settings()
	engine = ScriptEngine(settings.engine)
	executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="ebs2-run")
	timeout = settings.engine.execution_timeout_seconds

	app = FastAPI(title=APP_NAME, version=__version__)
	app.state.engine = engine
	app.state.settings = settings

	if STATIC_DIR.exists():
		app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.server.cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	@app.get("/", response_class=HTMLResponse)
	def index() -> HTMLResponse:
		index_path = STATIC_DIR / "index.html"
		if index_path.exists():
			return HTMLResponse(index_path.read_text(encoding="utf-8"))
		return HTMLResponse(
			f"<h2>{APP_NAME}</h2>"
			"<p>POST <code>/api/script/execute</code> with JSON: <code>{\"code\": \"print 1 + 2\"}</code></p>"
			"<p>POST <code>/api/script/validate</code> and <code>/api/script/compile</code> take the same body.</p>"
		)

	@app.get("/health")
	def health() -> Dict[str, Any]:
		return {"status": "UP", "timestamp": int(time.time() * 1000)}

	@app.get("/api/script/version")
	def version() -> Dict[str, Any]:
		return {"name": APP_NAME, "version": __version__, "api": "REST"}

	@app.post("/api/script/execute")
	def execute(req: ScriptRequest) -> Any:
		if _blank(req.code):
			return _error_response(400, "Code cannot be empty")
		future = executor.submit(engine.run, req.code, None, req.cache_key)
		try:
			result = future.result(timeout=timeout)
		except FutureTimeout:
			# The worker thread cannot be interrupted; its result is discarded
			logger.warning("Script execution exceeded %.1f s", timeout)
			return {
				"success": False,
				"output": "",
				"error_count": 0,
				"errors": [],
				"runtime_error": f"Execution timed out after {timeout:g} seconds",
				"message": "Execution timed out",
			}
		art = result.compilation
		if art.has_errors:
			message = summarize_errors(art.error_count)
		elif result.runtime_error is not None:
			message = "Runtime error"
		else:
			message = "Script executed successfully"
		return {
			"success": result.success,
			"output": result.output,
			"error_count": art.error_count,
			"errors": art.error_messages,
			"runtime_error": str(result.runtime_error) if result.runtime_error is not None else None,
			"message": message,
			"duration_ms": result.duration_ms,
		}

	@app.post("/api/script/validate")
	def validate(req: ScriptRequest) -> Any:
		if _blank(req.code):
			return _error_response(400, "Code cannot be empty")
		art = engine.validate(req.code)  # type: ignore[arg-type]
		return {
			"valid": not art.has_errors,
			"error_count": art.error_count,
			"errors": art.error_messages,
			"message": summarize_errors(art.error_count),
		}

	@app.post("/api/script/compile")
	def compile_source(req: ScriptRequest) -> Any:
		if _blank(req.code):
			return _error_response(400, "Code cannot be empty")
		art = engine.compile(req.code, cache_key=req.cache_key)  # type: ignore[arg-type]
		printer = AstPrinter()
		return {
			"duration_ms": art.duration_ms,
			"from_cache": art.from_cache,
			"token_count": len(art.tokens),
			"error_count": art.error_count,
			"diagnostics": _diagnostics(art),
			"tokens": [
				{
					"type": t.type.name,
					"lexeme": t.lexeme,
					"value": _to_json(t.literal),
					"line": t.line,
					"column": t.column,
				}
				for t in art.tokens
				if t.type != TokenType.EOF
			],
			"outline": [printer.print(stmt) for stmt in art.statements],
			"ast": _to_json(to_outline(art.statements)),
		}

	@app.delete("/api/script/cache")
	def clear_cache() -> Dict[str, Any]:
		return {"removed": engine.invalidate()}

	@app.delete("/api/script/cache/{key}")
	def remove_cached(key: str) -> Dict[str, Any]:
		return {"removed": engine.invalidate(key)}

	return app


app = create_app()
