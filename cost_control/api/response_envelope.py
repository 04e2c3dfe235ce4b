# This file builds success envelopes for API endpoints in a consistent format.
# Each envelope carries a success flag, a human message, the payload, and version/trace fields.
# The helpers return plain dictionaries that the routers' response models validate.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from cost_control.api.api_config import ApiConfig
from cost_control.api.schema_versions import build_version_fields


def utc_now() -> datetime:
    """Return timezone-aware UTC timestamp for response generation."""

    return datetime.now(tz=UTC)


def build_list_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: list[dict[str, Any]],
    pagination: dict[str, Any],
    message: str | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard paginated list response envelope."""

    return {
        **build_version_fields(
            api_version_path=config.api_version_path, schema_version=config.schema_version
        ),
        "success": True,
        "message": message,
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "pagination": pagination,
        "warnings": warnings,
    }


def build_object_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: Any,
    message: str | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard non-paginated response envelope."""

    return {
        **build_version_fields(
            api_version_path=config.api_version_path, schema_version=config.schema_version
        ),
        "success": True,
        "message": message,
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "warnings": warnings,
    }
