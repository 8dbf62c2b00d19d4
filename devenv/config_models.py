# devenv/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the developer environment
tool, including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from devenv import config as static_config

# --- Default Static Values (can be overridden by config file/env/cli) ---
LOG_PREFIX_DEFAULT: str = "[FLOWDESK]"

DB_USERNAME_DEFAULT: str = "zhost_user"
DB_DATABASE_DEFAULT: str = "zhost"
DB_HOST_DEFAULT: str = "127.0.0.1"
DB_PORT_DEFAULT: int = 5432

COMPOSE_COMMAND_DEFAULT: List[str] = ["docker", "compose"]
REQUIRED_TOOLS_DEFAULT: List[str] = ["git", "docker"]

READINESS_INTERVAL_DEFAULT: float = 2.0

BACKEND_URL_DEFAULT: str = "http://localhost:8000"
FRONTEND_URL_DEFAULT: str = "http://localhost:3000"

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
    "hourglass": "⏳",
    "key": "🔑",
    "party": "🎉",
    "point": "👉",
}


class DatabaseSettings(BaseSettings):
    """Database credentials used by the readiness probe only."""

    model_config = SettingsConfigDict(env_prefix="DB_", extra="ignore")

    username: str = Field(
        default=DB_USERNAME_DEFAULT,
        description="Database user passed to pg_isready / psycopg (DB_USERNAME).",
    )
    database: str = Field(
        default=DB_DATABASE_DEFAULT,
        description="Database name passed to pg_isready / psycopg (DB_DATABASE).",
    )
    host: str = Field(
        default=DB_HOST_DEFAULT, description="Host used by the direct probe."
    )
    port: int = Field(
        default=DB_PORT_DEFAULT, description="Port used by the direct probe."
    )
    password: Optional[str] = Field(
        default=None, description="Password used by the direct probe."
    )


class ReadinessSettings(BaseModel):
    """How the bootstrap waits for the database."""

    mode: Literal["compose", "direct"] = Field(
        default="compose",
        description="'compose' runs pg_isready inside the db service; 'direct' connects with psycopg from the host.",
    )
    interval: float = Field(
        default=READINESS_INTERVAL_DEFAULT,
        ge=0,
        description="Seconds to sleep between probe attempts.",
    )
    max_attempts: Optional[int] = Field(
        default=None,
        ge=1,
        description="Give up after this many failed probes. None retries until interrupted.",
    )
    connect_timeout: int = Field(
        default=3, ge=1, description="Connect timeout for the direct probe."
    )


class ComposeSettings(BaseModel):
    """Container runtime and service naming."""

    command: List[str] = Field(
        default_factory=lambda: list(COMPOSE_COMMAND_DEFAULT),
        description="Compose CLI invocation, e.g. ['docker', 'compose'] or ['podman', 'compose'].",
    )
    app_service: str = Field(default="app", description="Laravel (PHP-FPM) service.")
    node_service: str = Field(default="node", description="Next.js service.")
    db_service: str = Field(default="db", description="PostgreSQL service.")
    tools_service: str = Field(
        default="tools", description="Utility container with Composer, NPM and linters."
    )
    app_owner: str = Field(
        default="appuser:appgroup",
        description="Owner applied to Laravel writable paths inside the app container.",
    )

    @field_validator("command", mode="before")
    @classmethod
    def _split_command(cls, value):
        if isinstance(value, str):
            return value.split()
        return value


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="FLOWDESK_", extra="ignore")

    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Root of the FlowDesk checkout (holds docker-compose.yml). Defaults to the working directory.",
    )
    log_prefix: str = Field(
        default=LOG_PREFIX_DEFAULT, description="Prefix for log messages."
    )
    setup_marker: str = Field(
        default=static_config.SETUP_MARKER_NAME,
        description="Marker file, relative to project_root, written after a successful setup.",
    )
    lock_timeout: float = Field(
        default=0,
        description="Seconds to wait for another setup run to release its lock. 0 fails immediately.",
    )
    required_tools: List[str] = Field(
        default_factory=lambda: list(REQUIRED_TOOLS_DEFAULT),
        description="Host executables that must be on PATH before setup.",
    )
    backend_url: str = Field(default=BACKEND_URL_DEFAULT)
    frontend_url: str = Field(default=FRONTEND_URL_DEFAULT)

    compose: ComposeSettings = Field(default_factory=ComposeSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    readiness: ReadinessSettings = Field(default_factory=ReadinessSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    @property
    def marker_path(self) -> Path:
        return self.project_root / self.setup_marker

    @property
    def lock_path(self) -> Path:
        return self.project_root / static_config.SETUP_LOCK_NAME

    def path(self, relative: str) -> Path:
        """Resolve a project-relative path."""
        return self.project_root / relative
