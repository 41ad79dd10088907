"""FileDeck configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "FileDeck"
    debug: bool = True
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Storage trees (relative resolved from backend/ at runtime)
    files_dir: str = "./data/files"
    cache_dir: str = ""  # empty = <files_dir>/.cache

    # Previews
    preview_width: int = 159
    preview_height: int = 139
    preview_quality: int = 80
    checker_tile_size: int = 20  # px
    blurhash_x_components: int = 4
    blurhash_y_components: int = 3

    # Directory tree
    hidden_dirs: list[str] = [".cache"]
    max_dir_depth: int = 20

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="FILEDECK_",
        extra="ignore",
    )

    @field_validator("cors_origins", "hidden_dirs", mode="before")
    @classmethod
    def split_comma_list(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure storage directories are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        if not Path(self.files_dir).is_absolute():
            self.files_dir = str(base / self.files_dir)
        if not self.cache_dir:
            self.cache_dir = str(Path(self.files_dir) / ".cache")
        elif not Path(self.cache_dir).is_absolute():
            self.cache_dir = str(base / self.cache_dir)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
