"""Application settings.

Settings come from pydantic models with defaults, optionally overlaid by a JSON
file (explicit path or ``EBS2_CONFIG``) and then by ``EBS2_*`` environment
variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_ENV = "EBS2_CONFIG"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

TRUE_WORDS = ("1", "true", "yes", "on")
FALSE_WORDS = ("0", "false", "no", "off", "")


class ConfigError(Exception):
	pass


class EngineSettings(BaseModel):
	model_config = ConfigDict(extra="forbid")

	cache_enabled: bool = True
	execution_timeout_seconds: float = Field(default=5.0, gt=0)


class ServerSettings(BaseModel):
	model_config = ConfigDict(extra="forbid")

	host: str = "localhost"
	port: int = Field(default=8080, ge=1, le=65535)
	cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class ConsoleSettings(BaseModel):
	model_config = ConfigDict(extra="forbid")

	font_family: str = "Consolas"
	font_size: int = Field(default=11, ge=6, le=48)
	background: str = "#1e1e1e"
	foreground: str = "#d4d4d4"
	keyword_color: str = "#569cd6"
	literal_color: str = "#ce9178"
	identifier_color: str = "#dcdcaa"
	comment_color: str = "#6a9955"
	error_color: str = "#f14c4c"


class AppSettings(BaseModel):
	model_config = ConfigDict(extra="forbid")

	engine: EngineSettings = Field(default_factory=EngineSettings)
	server: ServerSettings = Field(default_factory=ServerSettings)
	console: ConsoleSettings = Field(default_factory=ConsoleSettings)
	log_level: str = "WARNING"

	@field_validator("log_level")
	@classmethod
	def _check_level(cls, value: str) -> str:
		level = value.strip().upper()
		if level == "WARN":
			level = "WARNING"
		if level not in LOG_LEVELS:
			raise ValueError(f"unknown log level {value!r}")
		return level


def load_settings(path: Union[str, Path, None] = None, environ: Optional[Mapping[str, str]] = None) -> AppSettings:
	env = os.environ if environ is None else environ
	data: Dict[str, Any] = {}

	config_path = path if path is not None else env.get(CONFIG_ENV)
	if config_path:
		data = _read_json(Path(config_path))

	_apply_env(data, env)

	try:
		return AppSettings.model_validate(data)
	except ValidationError as exc:
		raise ConfigError(f"Invalid configuration: {exc}") from exc


def _read_json(path: Path) -> Dict[str, Any]:
	try:
		raw = json.loads(path.read_text(encoding="utf-8"))
	except OSError as exc:
		raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
	except json.JSONDecodeError as exc:
		raise ConfigError(f"Configuration file {path} is not valid JSON: {exc}") from exc
	if not isinstance(raw, dict):
		raise ConfigError(f"Configuration file {path} must contain a JSON object")
	return raw


def _apply_env(data: Dict[str, Any], env: Mapping[str, str]) -> None:
	server = data.setdefault("server", {})
	engine = data.setdefault("engine", {})
	if not isinstance(server, dict) or not isinstance(engine, dict):
		raise ConfigError("'server' and 'engine' sections must be JSON objects")

	if "EBS2_HOST" in env:
		server["host"] = env["EBS2_HOST"]
	if "EBS2_PORT" in env:
		try:
			server["port"] = int(env["EBS2_PORT"])
		except ValueError:
			raise ConfigError(f"EBS2_PORT must be an integer, got {env['EBS2_PORT']!r}") from None
	if "EBS2_CACHE_ENABLED" in env:
		engine["cache_enabled"] = _flag("EBS2_CACHE_ENABLED", env["EBS2_CACHE_ENABLED"])
	if "EBS2_LOG_LEVEL" in env:
		data["log_level"] = env["EBS2_LOG_LEVEL"]
	# debug wins over an explicit level
	if "EBS2_DEBUG" in env and _flag("EBS2_DEBUG", env["EBS2_DEBUG"]):
		data["log_level"] = "DEBUG"


def _flag(name: str, value: str) -> bool:
	lowered = value.strip().lower()
	if lowered in TRUE_WORDS:
		return True
	if lowered in FALSE_WORDS:
		return False
	raise ConfigError(f"{name} must be a boolean, got {value!r}")
