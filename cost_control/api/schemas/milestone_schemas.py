# This file defines milestone request and response models plus the progress summary contract.
# Request models are built only after the field rule set has passed, from the cleaned payload.

from __future__ import annotations

from datetime import date, datetime

from cost_control.api.schemas.common import CamelModel, EnvelopeFields


class MilestoneCreate(CamelModel):
    name: str
    description: str | None = None
    planned_date: date
    amount: float | None = None
    weight: float | None = None
    sequence: int | None = None


class MilestoneUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    planned_date: date | None = None
    actual_date: date | None = None
    amount: float | None = None
    weight: float | None = None
    is_completed: bool | None = None
    sequence: int | None = None


class MilestoneComplete(CamelModel):
    completion_date: date | None = None


class MilestoneV1(CamelModel):
    id: int
    project_id: int
    name: str
    description: str | None = None
    planned_date: date
    actual_date: date | None = None
    amount: float | None = None
    weight: float | None = None
    sequence: int | None = None
    is_completed: bool
    completion_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectProgressV1(CamelModel):
    project_id: int
    total_milestones: int
    completed_milestones: int
    total_weight: float
    completed_weight: float
    weighted_ratio: float
    count_ratio: float
    progress_percentage: float


class MilestoneResponseV1(EnvelopeFields):
    data: MilestoneV1


class MilestoneListResponseV1(EnvelopeFields):
    data: list[MilestoneV1]


class ProjectProgressResponseV1(EnvelopeFields):
    data: ProjectProgressV1
