# This file provides shared helpers for API endpoint tests.
# Tests override service dependencies so no real database is touched.
# The helpers build consistent config objects and scoped TestClient contexts.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from cost_control.api.api_config import DEFAULT_TABLE_NAMES, ApiConfig
from cost_control.api.app import app
from cost_control.api.dependencies import (
    get_account_category_service,
    get_config,
    get_cost_explorer_service,
    get_database_client,
    get_factoring_entity_service,
    get_milestone_service,
)

TEST_TOKEN = "test-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TEST_TOKEN}"}


def build_test_config(*, expose_error_details: bool = False) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Cost Control API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        environment="test",
        database_url="sqlite://",
        default_page_size=2,
        max_page_size=5,
        default_cost_sort="cost_date:desc",
        allowed_origins=[],
        auth_tokens=[TEST_TOKEN],
        expose_error_details=expose_error_details,
        app_version="0.1.0",
        allowed_table_names=set(DEFAULT_TABLE_NAMES.values()),
    )


class FakeDBClient:
    """Simple fake DB dependency for health/readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = existing_tables if existing_tables is not None else set(DEFAULT_TABLE_NAMES.values())

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    milestone_service: Any | None = None,
    account_category_service: Any | None = None,
    factoring_entity_service: Any | None = None,
    cost_explorer_service: Any | None = None,
    raise_server_exceptions: bool = True,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()

    app.dependency_overrides[get_config] = lambda: resolved_config
    if db_client is not None:
        app.dependency_overrides[get_database_client] = lambda: db_client
    if milestone_service is not None:
        app.dependency_overrides[get_milestone_service] = lambda: milestone_service
    if account_category_service is not None:
        app.dependency_overrides[get_account_category_service] = lambda: account_category_service
    if factoring_entity_service is not None:
        app.dependency_overrides[get_factoring_entity_service] = lambda: factoring_entity_service
    if cost_explorer_service is not None:
        app.dependency_overrides[get_cost_explorer_service] = lambda: cost_explorer_service

    try:
        with TestClient(app, raise_server_exceptions=raise_server_exceptions) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
