from typing import Final

from pydantic_settings import BaseSettings, SettingsConfigDict

# Folders that are never scanned, whatever the caller excludes on top
DEFAULT_EXCLUDED_FOLDERS: Final[frozenset[str]] = frozenset({".git", ".venv"})

SOURCE_SUFFIXES: Final[tuple[str, ...]] = (".py",)

INTROSPECTION_PATH: Final[str] = "/help"


class EnvConfig(BaseSettings):
    """Our default configuration for models that should load from .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


class RouteFuse(EnvConfig, env_prefix="routefuse_"):
    project_path: str = ""
    """Root of the scan when the caller does not pass one. Empty means the working directory."""
    exclude_filter: str = ""
    """Space-separated file and folder names, appended to the defaults."""
    enable_introspection: bool = False

    log_level: str = "INFO"
    log_json: bool = False
    log_config_file: str = ""
    """Optional TOML file holding a `logging.config.dictConfig` mapping."""


routefuse_settings = RouteFuse()  # pyright: ignore
