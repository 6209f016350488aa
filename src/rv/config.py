# src/rv/config.py
import logging
import tomllib
from pathlib import Path

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rv.errors import ConfigError
from rv.models.config import RepoConfig, RvConfig


logger = logging.getLogger(__name__)

REPO_CONFIG_FILE = ".rv.yaml"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_config_path() -> Path:
    return Path.home() / ".config" / "rv" / "config.toml"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RV_", extra="ignore")

    config_path: Path | None = None
    log_level: str = "WARNING"

    # Provider calls
    request_timeout: float = 60.0
    max_retries: int = 2
    retry_backoff: float = 0.5

    # git / gh subprocesses
    subprocess_timeout: float = 30.0

    # Upper bound for the serialized review context, in characters
    max_context_chars: int = 120_000

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def resolved_config_path(self) -> Path:
        return self.config_path or default_config_path()


def load_config(path: Path) -> RvConfig:
    """Read the TOML configuration file; a missing file yields the defaults."""
    if not path.exists():
        logger.info(f"No configuration at {path}, using built-in defaults")
        return RvConfig()

    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
        return RvConfig(**data)
    except (tomllib.TOMLDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid configuration file {path}: {e}") from e


def load_repo_config(root: Path) -> RepoConfig:
    """Load .rv.yaml from the repository root or use defaults."""
    config_file = root / REPO_CONFIG_FILE
    if not config_file.is_file():
        return RepoConfig()

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        return RepoConfig(**data)
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
        logger.warning(f"Invalid {REPO_CONFIG_FILE}: {e}")
        return RepoConfig()
