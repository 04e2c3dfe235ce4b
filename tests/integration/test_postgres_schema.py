import os

import pytest

from cost_control.api.api_config import load_api_config
from cost_control.api.db_access import DatabaseClient
from cost_control.api.schema_ddl import apply_api_ddl

if os.getenv("RUN_POSTGRES_INTEGRATION") != "1":
    pytest.skip("Set RUN_POSTGRES_INTEGRATION=1 to run PostgreSQL integration tests", allow_module_level=True)


@pytest.mark.integration
def test_schema_applies_and_tables_are_ready() -> None:
    config = load_api_config()
    db = DatabaseClient(database_url=config.database_url)
    if not db.can_connect():
        pytest.skip("Postgres unavailable in local test environment")

    apply_api_ddl(db.engine, config)

    assert db.dialect_name == "postgresql"
    assert db.table_exists(config.milestone_table_name) is True
    assert db.table_exists(config.cost_fact_table_name) is True
    db.dispose()
