# glowback/config.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from glowback.errors import ConfigError

DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_HISTORY_SIZE = 5


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    log_level: int = logging.INFO
    history_size: int = DEFAULT_HISTORY_SIZE

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> "Settings":
        """Собрать настройки из окружения (и .env, если он есть рядом)."""
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        api_key = (env.get("API_KEY") or env.get("GEMINI_API_KEY") or "").strip()
        if not api_key:
            raise ConfigError("API_KEY environment variable is not set")

        level_name = (env.get("GLOWBACK_LOG_LEVEL") or "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigError(f"Unknown log level: {level_name}")

        raw_size = (env.get("GLOWBACK_HISTORY_SIZE") or str(DEFAULT_HISTORY_SIZE)).strip()
        try:
            history_size = int(raw_size)
        except ValueError:
            raise ConfigError(f"GLOWBACK_HISTORY_SIZE must be an integer, got {raw_size!r}") from None
        if history_size < 1:
            raise ConfigError("GLOWBACK_HISTORY_SIZE must be at least 1")

        return cls(
            api_key=api_key,
            model=(env.get("GLOWBACK_MODEL") or DEFAULT_MODEL).strip(),
            log_level=level,
            history_size=history_size,
        )
