# This file defines liveness, readiness, and version endpoints for API operations.
# The readiness check confirms database connectivity and that the milestone and cost sources exist.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from cost_control.api.api_config import ApiConfig
from cost_control.api.db_access import DatabaseClient
from cost_control.api.dependencies import get_config, get_database_client
from cost_control.api.response_envelope import utc_now
from cost_control.api.schema_versions import build_version_fields
from cost_control.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
DBDep = Annotated[DatabaseClient, Depends(get_database_client)]


@router.get("/health", response_model=HealthResponse)
def health(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
        "timestamp": utc_now(),
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(
    request: Request,
    config: ConfigDep,
    db: DBDep,
) -> dict[str, object]:
    db_connected = db.can_connect()
    milestone_source_ready = db_connected and db.table_exists(config.milestone_table_name)
    cost_source_ready = db_connected and db.table_exists(config.cost_fact_table_name)
    is_ready = db_connected and milestone_source_ready and cost_source_ready

    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "db_connected": db_connected,
        "milestone_source_ready": milestone_source_ready,
        "cost_source_ready": cost_source_ready,
        "ready": is_ready,
        "database": "reachable" if db_connected else "unreachable",
        "timestamp": utc_now(),
    }


@router.get("/version", response_model=VersionResponse)
def version(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "project": config.api_name,
        "timestamp": utc_now(),
    }
