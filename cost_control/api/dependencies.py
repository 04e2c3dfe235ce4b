# This file provides dependency factories for FastAPI routes and middleware.
# The database client (and its connection pool) is built once here and injected into services.
# Routers receive services through Depends, so tests can swap any of them with overrides.

from __future__ import annotations

from functools import lru_cache

from cost_control.api.api_config import ApiConfig, get_api_config
from cost_control.api.db_access import DatabaseClient
from cost_control.api.services.account_category_service import AccountCategoryService
from cost_control.api.services.cost_explorer_service import CostExplorerService
from cost_control.api.services.factoring_entity_service import FactoringEntityService
from cost_control.api.services.milestone_service import MilestoneService


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


@lru_cache(maxsize=1)
def get_milestone_service() -> MilestoneService:
    return MilestoneService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_account_category_service() -> AccountCategoryService:
    return AccountCategoryService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_factoring_entity_service() -> FactoringEntityService:
    return FactoringEntityService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_cost_explorer_service() -> CostExplorerService:
    return CostExplorerService(config=get_api_config(), db=get_database_client())


def get_config() -> ApiConfig:
    return get_api_config()
