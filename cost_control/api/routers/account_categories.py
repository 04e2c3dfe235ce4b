# This file defines the account category catalog endpoints.
# Fixed lookup paths are registered before `/{category_id}` so they are never read as identifiers.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request

from cost_control.api.api_config import ApiConfig
from cost_control.api.auth import require_auth
from cost_control.api.dependencies import get_account_category_service, get_config
from cost_control.api.error_handlers import RequestValidationFailed
from cost_control.api.response_envelope import build_object_envelope
from cost_control.api.schemas.account_category_schemas import (
    AccountCategoryCreate,
    AccountCategoryListResponseV1,
    AccountCategoryResponseV1,
    AccountCategoryUpdate,
    CategoryTypeSummaryResponseV1,
)
from cost_control.api.services.account_category_service import (
    ACCOUNT_CATEGORY_TYPES,
    AccountCategoryService,
)
from cost_control.api.validation import (
    FieldViolation,
    is_boolean,
    is_length,
    is_string,
    one_of,
    optional,
    required,
    validate_body,
)

router = APIRouter(
    prefix="/account-categories",
    tags=["account-categories"],
    dependencies=[Depends(require_auth)],
)
CategoryServiceDep = Annotated[AccountCategoryService, Depends(get_account_category_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
JsonBody = Annotated[Any, Body()]

_TYPE_MESSAGE = f"type must be one of: {', '.join(ACCOUNT_CATEGORY_TYPES)}."
_CODE_CHECKS = (
    is_string("code must be a string."),
    is_length(1, 20, "code must be at most 20 characters."),
)
_NAME_CHECKS = (
    is_string("name must be a string."),
    is_length(1, 255, "name must be at most 255 characters."),
)
_TYPE_CHECKS = (one_of(ACCOUNT_CATEGORY_TYPES, _TYPE_MESSAGE),)
_GROUP_CHECKS = (
    is_string("groupName must be a string."),
    is_length(1, 100, "groupName must be at most 100 characters."),
)

ACCOUNT_CATEGORY_CREATE_RULES = (
    required("code", *_CODE_CHECKS, message="code is required."),
    required("name", *_NAME_CHECKS, message="name is required."),
    optional("type", *_TYPE_CHECKS),
    optional("groupName", *_GROUP_CHECKS),
    optional("active", is_boolean("active must be a boolean.")),
)

ACCOUNT_CATEGORY_UPDATE_RULES = (
    optional("code", *_CODE_CHECKS),
    optional("name", *_NAME_CHECKS),
    optional("type", *_TYPE_CHECKS),
    optional("groupName", *_GROUP_CHECKS),
    optional("active", is_boolean("active must be a boolean.")),
)


def _require_known_type(category_type: str, location: str) -> None:
    if category_type not in ACCOUNT_CATEGORY_TYPES:
        raise RequestValidationFailed(
            [FieldViolation(field="type", message=_TYPE_MESSAGE, location=location).as_dict()]
        )


@router.get("", response_model=AccountCategoryListResponseV1)
def list_account_categories(
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
    active: bool | None = Query(default=None),
    category_type: str | None = Query(default=None, alias="type"),
    group_name: str | None = Query(default=None),
    search: str | None = Query(default=None),
) -> dict[str, object]:
    if category_type:
        _require_known_type(category_type, "query")
    categories = service.list_categories(
        active=active,
        category_type=category_type,
        group_name=group_name,
        search=search,
    )
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=categories,
        message=f"{len(categories)} account categories found.",
    )


@router.get("/active", response_model=AccountCategoryListResponseV1)
def list_active_account_categories(
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.list_active(),
    )


@router.get("/grouped-by-type", response_model=CategoryTypeSummaryResponseV1)
def account_categories_grouped_by_type(
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.grouped_by_type(),
    )


@router.get("/type/{category_type}", response_model=AccountCategoryListResponseV1)
def account_categories_by_type(
    category_type: str,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    _require_known_type(category_type, "path")
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.list_by_type(category_type),
    )


@router.get("/group/{group_name}", response_model=AccountCategoryListResponseV1)
def account_categories_by_group(
    group_name: str,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.list_by_group(group_name),
    )


@router.get("/code/{code}", response_model=AccountCategoryResponseV1)
def account_category_by_code(
    code: str,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.get_by_code(code),
    )


@router.get("/{category_id}", response_model=AccountCategoryResponseV1)
def get_account_category(
    category_id: int,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.get(category_id),
    )


@router.post("", response_model=AccountCategoryResponseV1, status_code=201)
def create_account_category(
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(ACCOUNT_CATEGORY_CREATE_RULES, payload, AccountCategoryCreate)
    category = service.create(fields)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=category,
        message="Account category created successfully.",
    )


@router.put("/{category_id}", response_model=AccountCategoryResponseV1)
def update_account_category(
    category_id: int,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(ACCOUNT_CATEGORY_UPDATE_RULES, payload, AccountCategoryUpdate)
    category = service.update(category_id, fields)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=category,
        message="Account category updated successfully.",
    )


@router.delete("/{category_id}", response_model=AccountCategoryResponseV1)
def deactivate_account_category(
    category_id: int,
    request: Request,
    service: CategoryServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.deactivate(category_id),
        message="Account category deactivated successfully.",
    )
