"""Runtime configuration read from ``FIRE_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "scenarios.db")


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    store: str = "memory"
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"
    log_format: str = "[%(levelname)s] %(name)s: %(message)s"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.environ.get("FIRE_CORS_ORIGINS")
        return cls(
            cors_origins=_split_origins(origins) if origins else defaults.cors_origins,
            store=os.environ.get("FIRE_STORE", defaults.store).strip().lower(),
            db_path=os.environ.get("FIRE_DB_PATH", defaults.db_path),
            log_level=os.environ.get("FIRE_LOG_LEVEL", defaults.log_level).strip().upper(),
            log_format=os.environ.get("FIRE_LOG_FORMAT", "").strip() or defaults.log_format,
        )
