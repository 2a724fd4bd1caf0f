from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from models.gemini import DEFAULT_MODEL


class ConfigError(RuntimeError):
    """Raised when the service cannot start with the current environment."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    port: int = 3000
    host: str = "0.0.0.0"
    upload_dir: str = "uploads"
    gemini_model: str = DEFAULT_MODEL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables (and `.env` if present).

        Raises:
            ConfigError: if GOOGLE_API_KEY is missing, PORT is not an integer
                or LOG_LEVEL is not a level name.
        """
        if load_env_file:
            load_dotenv()

        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            raise ConfigError("Missing Google API key. Set GOOGLE_API_KEY in .env file")

        port = os.environ.get("PORT", "3000")
        try:
            port = int(port)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {port!r}") from None

        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

        return cls(
            google_api_key=api_key,
            port=port,
            host=os.environ.get("HOST", "0.0.0.0"),
            upload_dir=os.environ.get("UPLOAD_DIR", "uploads"),
            gemini_model=os.environ.get("GEMINI_MODEL", DEFAULT_MODEL),
            log_level=log_level,
        )
