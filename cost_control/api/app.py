# This file builds the FastAPI application and registers all API routers.
# Startup behavior, middleware, and error handling are configured here in one place.
# The app adds request IDs, timing headers, Prometheus metrics, and debug request logging.

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import RequestResponseEndpoint

from cost_control.api.api_config import get_api_config
from cost_control.api.dependencies import get_database_client
from cost_control.api.error_handlers import register_error_handlers
from cost_control.api.routers.account_categories import router as account_categories_router
from cost_control.api.routers.costs import router as costs_router
from cost_control.api.routers.factoring_entities import router as factoring_entities_router
from cost_control.api.routers.health import router as health_router
from cost_control.api.routers.milestones import router as milestones_router
from cost_control.api.schema_ddl import apply_api_ddl
from cost_control.common.logging import configure_logging

logger = logging.getLogger(__name__)

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "Total number of HTTP requests processed by the API.",
    ["method", "path", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "API request duration in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Number of API requests currently being processed.",
    ["method", "path"],
)


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def create_app() -> FastAPI:
    """Create configured FastAPI application instance."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "Versioned API for project milestones, progress tracking, account categories, "
            "factoring entities, and multidimensional cost exploration."
        ),
        version=config.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "milestones", "description": "Project milestones and derived progress."},
            {"name": "account-categories", "description": "Chart of cost account categories."},
            {"name": "factoring-entities", "description": "Factoring entities used for receivables."},
            {"name": "costs", "description": "Cost exploration, dimensions, and drill-downs."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        method_label = request.method
        path_label = request.url.path
        started = time.perf_counter()
        status_code = 500
        API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label, path=path_label).inc()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0

            response.headers["x-request-id"] = request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
            logger.debug(
                "%s %s -> %s in %.2fms (request_id=%s)",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
                request_id,
            )
            return response
        finally:
            duration_s = time.perf_counter() - started
            route_label = _route_label(request)
            API_HTTP_REQUESTS_TOTAL.labels(
                method=method_label,
                path=route_label,
                status_code=str(status_code),
            ).inc()
            API_HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method_label,
                path=route_label,
            ).observe(duration_s)
            API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label, path=path_label).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    def startup_checks() -> None:
        db = get_database_client()
        app.state.db_connected_at_startup = db.can_connect()
        if not app.state.db_connected_at_startup:
            logger.warning("Database is not reachable at startup; /ready will report unready.")
            return
        if config.auto_create_schema:
            try:
                apply_api_ddl(db.engine, config)
            except SQLAlchemyError:
                logger.exception("Applying the API schema failed.")
                raise

    register_error_handlers(app, expose_error_details=config.expose_error_details)

    app.include_router(health_router)
    app.include_router(milestones_router, prefix=config.api_version_path)
    app.include_router(account_categories_router, prefix=config.api_version_path)
    app.include_router(factoring_entities_router, prefix=config.api_version_path)
    app.include_router(costs_router, prefix=config.api_version_path)

    return app


app = create_app()
