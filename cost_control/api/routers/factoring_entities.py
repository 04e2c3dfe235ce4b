# This file defines the factoring entity endpoints.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from cost_control.api.api_config import ApiConfig
from cost_control.api.auth import require_auth
from cost_control.api.dependencies import get_config, get_factoring_entity_service
from cost_control.api.response_envelope import build_object_envelope
from cost_control.api.schemas.common import DeletedResponseV1
from cost_control.api.schemas.factoring_schemas import (
    FactoringEntityListResponseV1,
    FactoringEntityResponseV1,
    FactoringEntityWrite,
)
from cost_control.api.services.factoring_entity_service import FactoringEntityService
from cost_control.api.validation import is_length, is_string, required, validate_body

router = APIRouter(
    prefix="/factoring-entities",
    tags=["factoring-entities"],
    dependencies=[Depends(require_auth)],
)
FactoringServiceDep = Annotated[FactoringEntityService, Depends(get_factoring_entity_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
JsonBody = Annotated[Any, Body()]

FACTORING_ENTITY_RULES = (
    required(
        "name",
        is_string("name must be a string."),
        is_length(2, 100, "name must be between 2 and 100 characters."),
        message="name is required.",
    ),
)


@router.get("", response_model=FactoringEntityListResponseV1)
def list_factoring_entities(
    request: Request,
    service: FactoringServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.list_entities(),
    )


@router.get("/{entity_id}", response_model=FactoringEntityResponseV1)
def get_factoring_entity(
    entity_id: int,
    request: Request,
    service: FactoringServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.get(entity_id),
    )


@router.post("", response_model=FactoringEntityResponseV1, status_code=201)
def create_factoring_entity(
    request: Request,
    service: FactoringServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(FACTORING_ENTITY_RULES, payload, FactoringEntityWrite)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.create(fields.name),
        message="Factoring entity created successfully.",
    )


@router.put("/{entity_id}", response_model=FactoringEntityResponseV1)
def update_factoring_entity(
    entity_id: int,
    request: Request,
    service: FactoringServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(FACTORING_ENTITY_RULES, payload, FactoringEntityWrite)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.rename(entity_id, fields.name),
        message="Factoring entity updated successfully.",
    )


@router.delete("/{entity_id}", response_model=DeletedResponseV1)
def delete_factoring_entity(
    entity_id: int,
    request: Request,
    service: FactoringServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    service.delete(entity_id)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=None,
        message="Factoring entity deleted successfully.",
    )
