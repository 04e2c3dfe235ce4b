# This file defines shared schema pieces reused by multiple API endpoints.
# Envelope metadata, pagination, and error payloads stay consistent across resources.
# Resource models extend CamelModel so JSON bodies use camelCase while Python code stays snake_case.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationMetadata(BaseModel):
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_prev: bool
    sort: str


class EnvelopeFields(BaseModel):
    success: bool = True
    message: str | None = None
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime
    warnings: list[str] | None = None


class FieldError(BaseModel):
    field: str
    message: str
    location: str


class ErrorResponse(BaseModel):
    success: bool = False
    error_code: str
    message: str
    errors: list[FieldError] | None = None
    details: Any | None = None
    request_id: str
    timestamp: datetime


class DeletedResponseV1(EnvelopeFields):
    data: None = None
