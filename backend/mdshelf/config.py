"""MdShelf configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "MdShelf"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 3000
    api_prefix: str = "/api"
    # Comma-separated or a JSON array
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Auth: one shared password, signed session cookie
    access_password: str = "changeme"
    cookie_secret: str = "dev-secret"
    token_algorithm: str = "HS256"
    cookie_name: str = "auth"
    cookie_max_age_days: int = 30

    # Storage paths (relative resolved from backend/ at runtime)
    data_dir: str = "./data"
    blob_dir: str = "./data/files"
    database_path: str = "./data/mdshelf.db"
    frontend_dir: str = "../public"
    max_db_connections: int = 5

    # History / metadata store
    history_limit: int = 100
    kv_page_size: int = 1000

    # Retention: unfiled files are archived, then deleted
    archive_after_days: int = 30
    delete_after_days: int = 60
    retention_enabled: bool = True
    retention_hour: int = 3
    retention_minute: int = 15

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="MDSHELF_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:3000"]

    @model_validator(mode="after")
    def _check_retention_order(self) -> "Settings":
        if self.delete_after_days < self.archive_after_days:
            raise ValueError("delete_after_days must not be shorter than archive_after_days")
        return self

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure data directories are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        for field in ("data_dir", "blob_dir", "database_path", "frontend_dir"):
            val = getattr(self, field)
            if not Path(val).is_absolute():
                setattr(self, field, str((base / val).resolve()))
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
