"""Configuration management using environment variables."""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..orchestration.formats import SUPPORTED_FORMATS

logger = logging.getLogger(__name__)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_bool(value: str | bool | None) -> bool:
    """Parse boolean value from various formats."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on", "enabled")
    return bool(value)


def _getenv(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.getenv(key, default)


def _getenv_path(key: str) -> Optional[Path]:
    value = os.getenv(key)
    return Path(value) if value else None


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # ========== Engine ==========
    interchange_format: str = field(default_factory=lambda: _getenv("NODEFLOW_FORMAT", "json").lower())
    actions_dir: Optional[Path] = field(default_factory=lambda: _getenv_path("NODEFLOW_ACTIONS_DIR"))

    # ========== Logging ==========
    log_level: str = field(default_factory=lambda: _getenv("LOG_LEVEL", "INFO").upper())
    log_format: str = field(
        default_factory=lambda: _getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    log_file: Optional[str] = field(default_factory=lambda: _getenv("LOG_FILE") or None)

    # ========== UI Settings ==========
    verbose: bool = field(default_factory=lambda: _parse_bool(_getenv("VERBOSE", "false")))
    json_output: bool = field(default_factory=lambda: _parse_bool(_getenv("JSON_OUTPUT", "false")))

    def __post_init__(self):
        """Validate enumerated settings."""
        if self.interchange_format == "yml":
            self.interchange_format = "yaml"
        if self.interchange_format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Invalid NODEFLOW_FORMAT='{self.interchange_format}'. "
                f"Expected one of: {', '.join(SUPPORTED_FORMATS)}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL='{self.log_level}'. Expected one of: {', '.join(sorted(LOG_LEVELS))}"
            )


def _load_environment() -> None:
    """Load a .env file from the current or home directory without overriding the environment."""
    for env_path in (Path(".env"), Path.home() / ".env"):
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded environment from {env_path}")
            break


# Singleton instance with thread-safe initialization
_config_instance: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get global config instance (singleton pattern, thread-safe)."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            # Double-check pattern to prevent race conditions
            if _config_instance is None:
                _load_environment()
                _config_instance = Config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached config so the next ``get_config`` re-reads the environment."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = ["Config", "get_config", "reset_config"]
