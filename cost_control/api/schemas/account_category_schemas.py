# This file defines account category request and response models.

from __future__ import annotations

from datetime import datetime

from cost_control.api.schemas.common import CamelModel, EnvelopeFields


class AccountCategoryCreate(CamelModel):
    code: str
    name: str
    type: str | None = None
    group_name: str | None = None
    active: bool | None = None


class AccountCategoryUpdate(CamelModel):
    code: str | None = None
    name: str | None = None
    type: str | None = None
    group_name: str | None = None
    active: bool | None = None


class AccountCategoryV1(CamelModel):
    id: int
    code: str
    name: str
    type: str
    group_name: str | None = None
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryTypeSummaryV1(CamelModel):
    type: str
    count: int
    groups: list[str]


class AccountCategoryResponseV1(EnvelopeFields):
    data: AccountCategoryV1


class AccountCategoryListResponseV1(EnvelopeFields):
    data: list[AccountCategoryV1]


class CategoryTypeSummaryResponseV1(EnvelopeFields):
    data: list[CategoryTypeSummaryV1]
