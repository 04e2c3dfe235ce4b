# This file defines cost exploration endpoints over the multidimensional cost view.
# The explore route enforces deterministic pagination and allowlisted sorting for repeatable pages.
# Drill-down routes aggregate one cost center or category by the other dimension and by month.

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from cost_control.api.api_config import ApiConfig
from cost_control.api.auth import require_auth
from cost_control.api.dependencies import get_config, get_cost_explorer_service
from cost_control.api.error_handlers import APIError
from cost_control.api.pagination import build_pagination_metadata, normalize_pagination, parse_sort
from cost_control.api.response_envelope import build_list_envelope, build_object_envelope
from cost_control.api.schemas.cost_schemas import (
    CategoryDrillDownResponseV1,
    CostCenterDrillDownResponseV1,
    CostDimensionsResponseV1,
    CostFactListResponseV1,
    QuickStatsResponseV1,
)
from cost_control.api.services.cost_explorer_service import (
    COST_SORT_FIELD_MAP,
    TRANSACTION_TYPES,
    CostExplorerService,
    CostFilters,
    PeriodFilters,
)

router = APIRouter(prefix="/costs", tags=["costs"], dependencies=[Depends(require_auth)])
CostServiceDep = Annotated[CostExplorerService, Depends(get_cost_explorer_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]


def _invalid_query(message: str) -> APIError:
    return APIError(status_code=400, error_code="INVALID_QUERY_PARAM", message=message)


def _check_transaction_type(transaction_type: str | None) -> None:
    if transaction_type is not None and transaction_type not in TRANSACTION_TYPES:
        raise _invalid_query(f"transaction_type must be one of: {', '.join(TRANSACTION_TYPES)}")


def _check_date_window(date_from: date | None, date_to: date | None) -> None:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise APIError(
            status_code=400,
            error_code="INVALID_DATE_WINDOW",
            message="date_from must be less than or equal to date_to.",
        )


@router.get("/explore", response_model=CostFactListResponseV1)
def explore_costs(
    request: Request,
    service: CostServiceDep,
    config: ConfigDep,
    transaction_type: str | None = Query(default=None),
    cost_center_id: int | None = Query(default=None),
    cost_center_type: str | None = Query(default=None),
    category_id: int | None = Query(default=None),
    category_group: str | None = Query(default=None),
    employee_id: int | None = Query(default=None),
    employee_department: str | None = Query(default=None),
    supplier_id: int | None = Query(default=None),
    source_type: str | None = Query(default=None),
    period_year: int | None = Query(default=None),
    period_month: int | None = Query(default=None, ge=1, le=12),
    amount_min: float | None = Query(default=None),
    amount_max: float | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1),
    page_size: int | None = Query(default=None),
    sort: str | None = Query(default=None),
) -> dict[str, object]:
    _check_transaction_type(transaction_type)
    _check_date_window(date_from, date_to)
    if amount_min is not None and amount_max is not None and amount_min > amount_max:
        raise _invalid_query("amount_min must be less than or equal to amount_max.")

    try:
        pagination = normalize_pagination(
            page=page,
            page_size=page_size,
            default_page_size=config.default_page_size,
            max_page_size=config.max_page_size,
        )
        sort_spec = parse_sort(
            requested_sort=sort,
            default_sort=config.default_cost_sort,
            allowed_fields=set(COST_SORT_FIELD_MAP),
        )
    except ValueError as exc:
        raise _invalid_query(str(exc)) from exc

    filters = CostFilters(
        transaction_type=transaction_type,
        cost_center_id=cost_center_id,
        cost_center_type=cost_center_type,
        category_id=category_id,
        category_group=category_group,
        employee_id=employee_id,
        employee_department=employee_department,
        supplier_id=supplier_id,
        source_type=source_type,
        period_year=period_year,
        period_month=period_month,
        amount_min=amount_min,
        amount_max=amount_max,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    result = service.explore(
        filters=filters,
        page=pagination.page,
        page_size=pagination.page_size,
        sort=sort_spec,
    )

    return build_list_envelope(
        config=config,
        request_id=request.state.request_id,
        data=list(result["rows"]),
        pagination=build_pagination_metadata(
            pagination=pagination,
            total_count=int(result["total_count"]),
            sort=sort_spec,
        ),
    )


@router.get("/dimensions", response_model=CostDimensionsResponseV1)
def cost_dimensions(
    request: Request,
    service: CostServiceDep,
    config: ConfigDep,
    transaction_type: str | None = Query(default=None),
    cost_center_type: str | None = Query(default=None),
) -> dict[str, object]:
    _check_transaction_type(transaction_type)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.dimensions(
            transaction_type=transaction_type,
            cost_center_type=cost_center_type,
        ),
    )


@router.get("/drill-down/cost-center/{cost_center_id}", response_model=CostCenterDrillDownResponseV1)
def drill_down_cost_center(
    cost_center_id: int,
    request: Request,
    service: CostServiceDep,
    config: ConfigDep,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    period_year: int | None = Query(default=None),
    period_month: int | None = Query(default=None, ge=1, le=12),
) -> dict[str, object]:
    _check_date_window(date_from, date_to)
    period = PeriodFilters(
        date_from=date_from, date_to=date_to, period_year=period_year, period_month=period_month
    )
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.drill_down_cost_center(cost_center_id, period),
    )


@router.get("/drill-down/category/{category_id}", response_model=CategoryDrillDownResponseV1)
def drill_down_category(
    category_id: int,
    request: Request,
    service: CostServiceDep,
    config: ConfigDep,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    period_year: int | None = Query(default=None),
    period_month: int | None = Query(default=None, ge=1, le=12),
) -> dict[str, object]:
    _check_date_window(date_from, date_to)
    period = PeriodFilters(
        date_from=date_from, date_to=date_to, period_year=period_year, period_month=period_month
    )
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.drill_down_category(category_id, period),
    )


@router.get("/quick-stats", response_model=QuickStatsResponseV1)
def cost_quick_stats(
    request: Request,
    service: CostServiceDep,
    config: ConfigDep,
    period_year: int | None = Query(default=None),
    period_month: int | None = Query(default=None, ge=1, le=12),
    cost_center_type: str | None = Query(default=None),
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=service.quick_stats(
            period_year=period_year,
            period_month=period_month,
            cost_center_type=cost_center_type,
        ),
    )
