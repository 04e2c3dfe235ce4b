"""DDL helpers for the tables read and written by the API.

Statements are rendered per dialect: PostgreSQL in deployments, SQLite for
the service tests. The cost fact table is a materialized stand-in for the
multidimensional cost view that production databases expose under the same
name.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from cost_control.api.api_config import ApiConfig


def _id_column(dialect_name: str) -> str:
    if dialect_name == "sqlite":
        return "INTEGER PRIMARY KEY AUTOINCREMENT"
    return "BIGSERIAL PRIMARY KEY"


def build_ddl_statements(config: ApiConfig, dialect_name: str) -> list[str]:
    """Return CREATE statements in dependency order."""

    id_column = _id_column(dialect_name)
    projects = config.validate_table_name(config.project_table_name)
    milestones = config.validate_table_name(config.milestone_table_name)
    categories = config.validate_table_name(config.account_category_table_name)
    factoring = config.validate_table_name(config.factoring_entity_table_name)
    cost_facts = config.validate_table_name(config.cost_fact_table_name)

    return [
        f"""
        CREATE TABLE IF NOT EXISTS {projects} (
            id {id_column},
            name VARCHAR(255) NOT NULL,
            owner_id INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {milestones} (
            id {id_column},
            project_id INTEGER NOT NULL REFERENCES {projects}(id) ON DELETE CASCADE,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            planned_date DATE NOT NULL,
            actual_date DATE,
            amount NUMERIC(15, 2),
            weight NUMERIC(7, 2),
            sequence INTEGER,
            is_completed BOOLEAN NOT NULL DEFAULT FALSE,
            completion_date DATE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"CREATE INDEX IF NOT EXISTS idx_{milestones}_project ON {milestones}(project_id)",
        f"""
        CREATE TABLE IF NOT EXISTS {categories} (
            id {id_column},
            code VARCHAR(20) NOT NULL UNIQUE,
            name VARCHAR(255) NOT NULL,
            type VARCHAR(50) NOT NULL DEFAULT 'general_expenses',
            group_name VARCHAR(100),
            active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {factoring} (
            id {id_column},
            name VARCHAR(100) NOT NULL UNIQUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {cost_facts} (
            cost_id {id_column},
            transaction_type VARCHAR(20) NOT NULL,
            cost_center_id INTEGER NOT NULL,
            cost_center_code VARCHAR(50),
            cost_center_name VARCHAR(255),
            cost_center_type VARCHAR(50),
            cost_center_client VARCHAR(255),
            category_id INTEGER,
            category_code VARCHAR(20),
            category_name VARCHAR(255),
            category_type VARCHAR(50),
            category_group VARCHAR(100),
            employee_id INTEGER,
            employee_name VARCHAR(255),
            employee_position VARCHAR(255),
            employee_department VARCHAR(255),
            supplier_id INTEGER,
            supplier_name VARCHAR(255),
            source_type VARCHAR(50),
            description TEXT,
            amount NUMERIC(15, 2) NOT NULL,
            cost_date DATE NOT NULL,
            period_year INTEGER NOT NULL,
            period_month INTEGER NOT NULL,
            period_key VARCHAR(7) NOT NULL
        )
        """,
        f"CREATE INDEX IF NOT EXISTS idx_{cost_facts}_center ON {cost_facts}(cost_center_id)",
        f"CREATE INDEX IF NOT EXISTS idx_{cost_facts}_category ON {cost_facts}(category_id)",
    ]


def apply_api_ddl(engine: Engine, config: ApiConfig) -> None:
    """Create every API table that does not exist yet."""

    statements = build_ddl_statements(config, engine.dialect.name)
    with engine.begin() as connection:
        for statement in statements:
            connection.exec_driver_sql(statement)
