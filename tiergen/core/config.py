"""
Core configuration module for TierGen.
Uses pydantic-settings for environment variable management with full validation.
"""
from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from tiergen.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────────────────
    APP_NAME: str = "TierGen"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ──────────────────────────────────────────────────────────────
    DB_SERVER: str | None = None
    DB_NAME: str | None = None
    DB_TRUSTED_CONNECTION: bool = True
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None
    DB_DRIVER: str = "ODBC Driver 18 for SQL Server"
    DATABASE_URL: str | None = None
    EXCLUDED_SCHEMAS: Annotated[list[str], NoDecode] = ["sys", "INFORMATION_SCHEMA"]

    # ── Output ────────────────────────────────────────────────────────────────
    OUTPUT_DIR: str | None = None
    TARGET_FRAMEWORK: str = "net48"
    LANG_VERSION: str = "8.0"

    @field_validator("EXCLUDED_SCHEMAS", mode="before")
    @classmethod
    def parse_excluded_schemas(cls, v: Any) -> list[str]:
        """Accept JSON array string or Python list."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, ValueError):
                pass
            # Comma-separated fallback
            return [schema.strip() for schema in v.split(",") if schema.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown LOG_LEVEL '{v}'")
        return level

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        if not self.DB_TRUSTED_CONNECTION and self.DB_PASSWORD and not self.DB_USER:
            raise ValueError("DB_USER is required when DB_PASSWORD is set")
        return self

    @property
    def solution_name(self) -> str:
        if self.DB_NAME:
            return self.DB_NAME
        if self.DATABASE_URL:
            database = make_url(self.DATABASE_URL).database
            if database:
                return database.rsplit("/", 1)[-1].split(".", 1)[0] or "Database"
        raise ConfigurationError("A database name is required")

    @property
    def sqlalchemy_url(self) -> URL:
        """Async SQLAlchemy URL; DATABASE_URL wins over the SQL Server fields."""
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        if not self.DB_SERVER or not self.DB_NAME:
            raise ConfigurationError("DB_SERVER and DB_NAME are required")
        query: dict[str, str] = {"driver": self.DB_DRIVER, "TrustServerCertificate": "yes"}
        if self.DB_TRUSTED_CONNECTION:
            query["Trusted_Connection"] = "yes"
            return URL.create(
                "mssql+aioodbc", host=self.DB_SERVER, database=self.DB_NAME, query=query
            )
        if not self.DB_USER:
            raise ConfigurationError("DB_USER is required for SQL Server authentication")
        return URL.create(
            "mssql+aioodbc",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_SERVER,
            database=self.DB_NAME,
            query=query,
        )

    @property
    def ado_connection_string(self) -> str:
        """Connection string written into the generated App.config."""
        server = self.DB_SERVER
        database = self.DB_NAME
        if self.DATABASE_URL and not (server and database):
            url = make_url(self.DATABASE_URL)
            server = server or url.host or ""
            database = database or self.solution_name
        if self.DB_TRUSTED_CONNECTION:
            return f"Server={server};Database={database};Integrated Security=True;"
        return (
            f"Server={server};Database={database};"
            f"User Id={self.DB_USER or ''};Password={self.DB_PASSWORD or ''};"
        )


settings = Settings()
