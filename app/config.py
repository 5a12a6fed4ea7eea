"""
app/config.py -- Process configuration.

Values come from the environment (case-insensitive) and an optional .env file.
`settings` is the process default; create_app() accepts an override.
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

# API key values that mean "do not talk to the remote flag provider"
LOCAL_FLAG_KEYS = frozenset({"", "dev-mode", "local"})


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production", "test"] = Field(default="development")
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = None

    # HTTP
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8080, ge=1, le=65535)
    api_prefix: str = Field(default="")

    # Record store
    data_dir: Path = Field(default=Path("data"))
    transactions_file: str = Field(default="transactions.json")

    # Feature flags (CloudBees Feature Management)
    rox_api_key: Optional[str] = None
    flag_namespace: str = Field(default="api")
    flag_refresh_interval: float = Field(default=60.0, gt=0)
    flag_setup_timeout: float = Field(default=10.0, gt=0)

    # Caller identity when X-User-ID is absent
    default_user_id: str = Field(default="user-001")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value).upper() if value else "INFO"
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"}
        if level not in allowed:
            return "INFO"
        return level

    @field_validator("api_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: object) -> str:
        prefix = str(value or "").strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file

    @property
    def remote_flags_enabled(self) -> bool:
        key = (self.rox_api_key or "").strip()
        return key not in LOCAL_FLAG_KEYS


settings = AppSettings()
