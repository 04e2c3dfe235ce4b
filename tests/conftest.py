"""
Shared test configuration.
Environment defaults are applied at import time because the API module builds its app on import.
Service tests get an in-memory SQLite database with the API tables already created.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS = {
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": "sqlite://",
    "API_AUTH_TOKENS": "test-token",
}

for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from cost_control.api.db_access import DatabaseClient  # noqa: E402
from cost_control.api.schema_ddl import apply_api_ddl  # noqa: E402
from tests.api.support import build_test_config  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture()
def sqlite_db() -> Iterator[DatabaseClient]:
    """Database client over a private in-memory SQLite database with the API schema applied."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    apply_api_ddl(engine, build_test_config())
    client = DatabaseClient(engine=engine)
    try:
        yield client
    finally:
        client.dispose()
