"""Configuration utilities for the survey form service.

Settings for the database, form behaviour defaults and respondent sessions.
Values come from the environment, `config/` override files or
`surveyflow_config.json`; pydantic models validate the result.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("surveyflow_config.json")
logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _flag(text: Optional[str]) -> bool:
    return str(text).strip().lower() in _TRUE_TOKENS


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class FormsConfig(BaseModel):
    allow_back_navigation_default: bool = Field(default=True)
    use_descriptive_ids: bool = Field(default=True)
    # Open forms untouched this long are dropped; 0 keeps them indefinitely
    idle_ttl_seconds: int = Field(default=3600, ge=0)


class SessionsConfig(BaseModel):
    enabled: bool = Field(default=True)
    auto_apply_migrations: bool = Field(default=False)


class AppConfig(BaseModel):
    database: DatabaseConfig
    forms: FormsConfig
    sessions: SessionsConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load the service configuration.

    Each setting resolves from the first source that provides it: environment
    variable, text file under `config/`, key path in `surveyflow_config.json`,
    then the built-in default. `TEST_DATABASE_URL` outranks `DATABASE_URL`.
    """

    document = _read_json_file(ROOT_CONFIG)

    def _setting(env_keys: tuple[str, ...], file_name: Optional[str], json_path: str, default: str) -> str:
        for key in env_keys:
            value = _env(key)
            if value:
                return value
        if file_name:
            value = _read_config_file(file_name)
            if value:
                return value
        node: object = document
        for part in json_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return default if node is None else str(node)

    dsn = _setting(("TEST_DATABASE_URL", "DATABASE_URL"), "database.url", "database.dsn", "sqlite+pysqlite:///:memory:")
    allow_back = _setting(("FORMS_ALLOW_BACK_NAVIGATION",), "forms.allow_back_navigation", "forms.allow_back_navigation_default", "true")
    descriptive = _setting(("FORMS_USE_DESCRIPTIVE_IDS",), "forms.use_descriptive_ids", "forms.use_descriptive_ids", "true")
    idle_ttl = _setting(("FORMS_IDLE_TTL_SECONDS",), "forms.idle_ttl_seconds", "forms.idle_ttl_seconds", "3600")
    sessions_enabled = _setting(("SESSIONS_ENABLED",), "sessions.enabled", "sessions.enabled", "true")
    auto_migrate = _setting(("AUTO_APPLY_MIGRATIONS",), None, "sessions.auto_apply_migrations", "false")

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn),
            forms=FormsConfig(
                allow_back_navigation_default=_flag(allow_back),
                use_descriptive_ids=_flag(descriptive),
                idle_ttl_seconds=idle_ttl,
            ),
            sessions=SessionsConfig(
                enabled=_flag(sessions_enabled),
                auto_apply_migrations=_flag(auto_migrate),
            ),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "FormsConfig",
    "SessionsConfig",
    "load_config",
]
