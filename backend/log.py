"""Shared logging setup so every module writes the same format to stderr."""

from __future__ import annotations

import logging


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper().strip())
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging(level_name: str = "INFO", fmt: str = "[%(levelname)s] %(name)s: %(message)s") -> None:
    """Attach a single stream handler to the root logger (idempotent)."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())
    formatter = logging.Formatter(fmt)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
    root_logger.setLevel(_resolve_level(level_name))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
