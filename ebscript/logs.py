from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LEVELS = {
	"debug": logging.DEBUG,
	"info": logging.INFO,
	"warn": logging.WARNING,
	"warning": logging.WARNING,
	"error": logging.ERROR,
	"critical": logging.CRITICAL,
}


def resolve_level(level: Union[str, int, None]) -> int:
	if level is None:
		return logging.WARNING
	if isinstance(level, int):
		return level
	return LEVELS.get(level.strip().lower(), logging.WARNING)


def configure_logging(level: Union[str, int, None] = None, stream: Optional[object] = None) -> logging.Logger:
	"""Attach one stream handler to the ``ebscript`` logger and set its level."""
	package_logger = logging.getLogger("ebscript")
	package_logger.setLevel(resolve_level(level))
	if not package_logger.handlers:
		handler = logging.StreamHandler(stream)  # type: ignore[arg-type]
		handler.setFormatter(logging.Formatter(LOG_FORMAT))
		package_logger.addHandler(handler)
		# Avoid duplicate lines through the root logger
		package_logger.propagate = False
	return package_logger
