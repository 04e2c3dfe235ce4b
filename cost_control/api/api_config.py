# This file defines runtime settings for the API layer in one place.
# Versioning, pagination, auth tokens, and table names are configurable without code edits.
# Table names are validated as SQL identifiers and checked against an allowlist before use.

from __future__ import annotations

import os
import re
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

DEFAULT_TABLE_NAMES: dict[str, str] = {
    "project_table_name": "projects",
    "milestone_table_name": "project_milestones",
    "account_category_table_name": "account_categories",
    "factoring_entity_table_name": "factoring_entities",
    "cost_fact_table_name": "cost_facts",
}


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Cost Control API"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    environment: str = "local"
    database_url: str
    default_page_size: int = 25
    max_page_size: int = 100
    default_cost_sort: str = "cost_date:desc"
    allowed_origins: list[str] = Field(default_factory=list)
    auth_tokens: list[str] = Field(default_factory=list)
    expose_error_details: bool = False
    auto_create_schema: bool = False
    project_table_name: str = "projects"
    milestone_table_name: str = "project_milestones"
    account_category_table_name: str = "account_categories"
    factoring_entity_table_name: str = "factoring_entities"
    cost_fact_table_name: str = "cost_facts"
    app_version: str = "0.1.0"
    allowed_table_names: set[str] = Field(default_factory=lambda: set(DEFAULT_TABLE_NAMES.values()))

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator(*DEFAULT_TABLE_NAMES)
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier: {value!r}")
        return value

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    def api_version_label(self) -> str:
        return self.api_version_path.rstrip("/").split("/")[-1]

    def validate_table_name(self, table_name: str) -> str:
        if not _IDENTIFIER_RE.match(table_name):
            raise ValueError(f"Unsafe SQL identifier: {table_name!r}")
        if table_name not in self.allowed_table_names:
            raise ValueError(f"Table name is not in allowlist: {table_name!r}")
        return table_name


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def _build_allowed_table_names(config_values: dict[str, object]) -> set[str]:
    configured_names = {str(config_values[key]) for key in DEFAULT_TABLE_NAMES}
    configured_names.update(DEFAULT_TABLE_NAMES.values())
    configured_names.update(_env_list("API_ALLOWED_TABLE_NAMES", []))
    for table_name in configured_names:
        if not _IDENTIFIER_RE.match(table_name):
            raise ValueError(f"Unsafe SQL identifier in allowlist: {table_name!r}")
    return configured_names


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Cost Control API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "schema_version": os.getenv("API_SCHEMA_VERSION", "1.0.0"),
        "environment": os.getenv("ENV", "local"),
        "database_url": os.getenv("DATABASE_URL", ""),
        "default_page_size": _env_int("API_DEFAULT_PAGE_SIZE", 25),
        "max_page_size": _env_int("API_MAX_PAGE_SIZE", 100),
        "default_cost_sort": os.getenv("API_DEFAULT_COST_SORT", "cost_date:desc"),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "auth_tokens": _env_list("API_AUTH_TOKENS", []),
        "expose_error_details": _env_bool("API_EXPOSE_ERROR_DETAILS", False),
        "auto_create_schema": _env_bool("API_AUTO_CREATE_SCHEMA", False),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    for key, default in DEFAULT_TABLE_NAMES.items():
        config_values[key] = os.getenv(f"API_{key.upper()}", default)

    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")

    config_values["allowed_table_names"] = _build_allowed_table_names(config_values)

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
