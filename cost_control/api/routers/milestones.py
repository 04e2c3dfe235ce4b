# This file defines project milestone endpoints under the versioned API path.
# Each write handler runs its field rule set before the service is called, so storage never sees bad input.
# Progress is exposed next to the milestone list because both are scoped to one project.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from cost_control.api.api_config import ApiConfig
from cost_control.api.auth import require_auth
from cost_control.api.dependencies import get_config, get_milestone_service
from cost_control.api.response_envelope import build_object_envelope
from cost_control.api.schemas.common import DeletedResponseV1
from cost_control.api.schemas.milestone_schemas import (
    MilestoneComplete,
    MilestoneCreate,
    MilestoneListResponseV1,
    MilestoneResponseV1,
    MilestoneUpdate,
    ProjectProgressResponseV1,
)
from cost_control.api.services.milestone_service import MilestoneService
from cost_control.api.validation import (
    at_most,
    in_range,
    is_boolean,
    is_date,
    is_int,
    is_length,
    is_numeric,
    is_string,
    non_negative,
    optional,
    required,
    validate_body,
)

router = APIRouter(tags=["milestones"], dependencies=[Depends(require_auth)])
MilestoneServiceDep = Annotated[MilestoneService, Depends(get_milestone_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
JsonBody = Annotated[Any, Body()]

_NAME_CHECKS = (
    is_string("name must be a string."),
    is_length(3, 100, "name must be between 3 and 100 characters."),
)
_DATE_MESSAGE = "must be a valid date in YYYY-MM-DD format."

# Bounds of the NUMERIC(15, 2), NUMERIC(7, 2) and INTEGER columns.
MAX_AMOUNT = 9_999_999_999_999.99
MAX_WEIGHT = 99_999.99
MIN_SEQUENCE = -2_147_483_648
MAX_SEQUENCE = 2_147_483_647

_AMOUNT_CHECKS = (
    is_numeric("amount must be a number."),
    non_negative("amount must be greater than or equal to 0."),
    at_most(MAX_AMOUNT, f"amount must be less than or equal to {MAX_AMOUNT:.2f}."),
)
_WEIGHT_CHECKS = (
    is_numeric("weight must be a number."),
    non_negative("weight must be greater than or equal to 0."),
    at_most(MAX_WEIGHT, f"weight must be less than or equal to {MAX_WEIGHT:.2f}."),
)
_SEQUENCE_CHECKS = (
    is_int("sequence must be an integer."),
    in_range(MIN_SEQUENCE, MAX_SEQUENCE, "sequence is out of range."),
)

MILESTONE_CREATE_RULES = (
    required("name", *_NAME_CHECKS, message="name is required."),
    optional("description", is_string("description must be a string.")),
    required("plannedDate", is_date(f"plannedDate {_DATE_MESSAGE}"), message="plannedDate is required."),
    optional("amount", *_AMOUNT_CHECKS),
    optional("weight", *_WEIGHT_CHECKS),
    optional("sequence", *_SEQUENCE_CHECKS),
)

MILESTONE_UPDATE_RULES = (
    optional("name", *_NAME_CHECKS),
    optional("description", is_string("description must be a string.")),
    optional("plannedDate", is_date(f"plannedDate {_DATE_MESSAGE}")),
    optional("actualDate", is_date(f"actualDate {_DATE_MESSAGE}")),
    optional("amount", *_AMOUNT_CHECKS),
    optional("weight", *_WEIGHT_CHECKS),
    optional("isCompleted", is_boolean("isCompleted must be a boolean.")),
    optional("sequence", *_SEQUENCE_CHECKS),
)

MILESTONE_COMPLETE_RULES = (
    optional("completionDate", is_date(f"completionDate {_DATE_MESSAGE}")),
)


@router.get("/projects/{project_id}/milestones", response_model=MilestoneListResponseV1)
def list_project_milestones(
    project_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    milestones = service.list_for_project(project_id)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=milestones,
        message=f"{len(milestones)} milestone(s) found.",
    )


@router.post(
    "/projects/{project_id}/milestones",
    response_model=MilestoneResponseV1,
    status_code=201,
)
def create_milestone(
    project_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(MILESTONE_CREATE_RULES, payload, MilestoneCreate)
    milestone = service.create(project_id, fields)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=milestone,
        message="Milestone created successfully.",
    )


@router.get("/projects/{project_id}/progress", response_model=ProjectProgressResponseV1)
def project_progress(
    project_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.progress(project_id),
    )


@router.get("/milestones/{milestone_id}", response_model=MilestoneResponseV1)
def get_milestone(
    milestone_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.get(milestone_id),
    )


@router.put("/milestones/{milestone_id}", response_model=MilestoneResponseV1)
def update_milestone(
    milestone_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(MILESTONE_UPDATE_RULES, payload, MilestoneUpdate)
    milestone = service.update(milestone_id, fields)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=milestone,
        message="Milestone updated successfully.",
    )


@router.delete("/milestones/{milestone_id}", response_model=DeletedResponseV1)
def delete_milestone(
    milestone_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    service.delete(milestone_id)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=None,
        message="Milestone deleted successfully.",
    )


@router.patch("/milestones/{milestone_id}/complete", response_model=MilestoneResponseV1)
def complete_milestone(
    milestone_id: int,
    request: Request,
    service: MilestoneServiceDep,
    config: ConfigDep,
    payload: JsonBody = None,
) -> dict[str, object]:
    fields = validate_body(MILESTONE_COMPLETE_RULES, payload, MilestoneComplete)
    milestone = service.complete(milestone_id, fields.completion_date)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=milestone,
        message="Milestone marked as completed.",
    )
