# This file defines response schemas for the cost exploration endpoints.
# Cost rows mirror the flattened cost fact view; aggregates carry counts and totals.

from __future__ import annotations

from datetime import date

from cost_control.api.schemas.common import CamelModel, EnvelopeFields, PaginationMetadata


class CostFactV1(CamelModel):
    cost_id: int
    transaction_type: str
    cost_center_id: int | None = None
    cost_center_code: str | None = None
    cost_center_name: str | None = None
    cost_center_type: str | None = None
    cost_center_client: str | None = None
    category_id: int | None = None
    category_code: str | None = None
    category_name: str | None = None
    category_type: str | None = None
    category_group: str | None = None
    employee_id: int | None = None
    employee_name: str | None = None
    employee_position: str | None = None
    employee_department: str | None = None
    supplier_id: int | None = None
    supplier_name: str | None = None
    source_type: str | None = None
    description: str | None = None
    amount: float
    cost_date: date
    period_year: int
    period_month: int
    period_key: str


class CostCenterDimensionV1(CamelModel):
    cost_center_id: int | None = None
    cost_center_code: str | None = None
    cost_center_name: str | None = None
    cost_center_type: str | None = None
    cost_center_client: str | None = None
    cost_count: int
    total_amount: float


class CategoryDimensionV1(CamelModel):
    category_id: int | None = None
    category_code: str | None = None
    category_name: str | None = None
    category_type: str | None = None
    category_group: str | None = None
    cost_count: int
    total_amount: float


class EmployeeDimensionV1(CamelModel):
    employee_id: int | None = None
    employee_name: str | None = None
    employee_position: str | None = None
    employee_department: str | None = None
    cost_count: int
    total_amount: float


class SupplierDimensionV1(CamelModel):
    supplier_id: int | None = None
    supplier_name: str | None = None
    cost_count: int
    total_amount: float


class PeriodDimensionV1(CamelModel):
    period_year: int
    period_month: int
    period_key: str
    cost_count: int
    total_amount: float


class SourceTypeDimensionV1(CamelModel):
    source_type: str | None = None
    cost_count: int
    total_amount: float


class CostDimensionsV1(CamelModel):
    cost_centers: list[CostCenterDimensionV1]
    categories: list[CategoryDimensionV1]
    employees: list[EmployeeDimensionV1]
    suppliers: list[SupplierDimensionV1]
    periods: list[PeriodDimensionV1]
    source_types: list[SourceTypeDimensionV1]


class TimeEvolutionPointV1(CamelModel):
    period_year: int
    period_month: int
    period_key: str
    transaction_type: str
    cost_count: int
    total_amount: float


class CategoryBreakdownV1(CamelModel):
    category_group: str | None = None
    category_name: str | None = None
    transaction_type: str
    cost_count: int
    total_amount: float
    avg_amount: float


class CostCenterBreakdownV1(CamelModel):
    cost_center_id: int | None = None
    cost_center_name: str | None = None
    cost_center_type: str | None = None
    transaction_type: str
    cost_count: int
    total_amount: float
    avg_amount: float


class TopEmployeeV1(CamelModel):
    employee_name: str | None = None
    employee_position: str | None = None
    cost_count: int
    total_amount: float


class CostCenterRefV1(CamelModel):
    cost_center_id: int
    cost_center_code: str | None = None
    cost_center_name: str | None = None
    cost_center_type: str | None = None
    cost_center_client: str | None = None


class CategoryRefV1(CamelModel):
    category_id: int
    category_code: str | None = None
    category_name: str | None = None
    category_type: str | None = None
    category_group: str | None = None


class CostCenterDrillDownV1(CamelModel):
    cost_center: CostCenterRefV1
    category_breakdown: list[CategoryBreakdownV1]
    time_evolution: list[TimeEvolutionPointV1]
    top_employees: list[TopEmployeeV1]


class CategoryDrillDownV1(CamelModel):
    category: CategoryRefV1
    cost_center_breakdown: list[CostCenterBreakdownV1]
    time_evolution: list[TimeEvolutionPointV1]


class QuickStatsV1(CamelModel):
    total_transactions: int
    unique_cost_centers: int
    unique_employees: int
    unique_suppliers: int
    total_expenses: float
    total_income: float
    net_result: float
    avg_transaction: float
    max_transaction: float
    min_transaction: float


class CostFactListResponseV1(EnvelopeFields):
    data: list[CostFactV1]
    pagination: PaginationMetadata


class CostDimensionsResponseV1(EnvelopeFields):
    data: CostDimensionsV1


class CostCenterDrillDownResponseV1(EnvelopeFields):
    data: CostCenterDrillDownV1


class CategoryDrillDownResponseV1(EnvelopeFields):
    data: CategoryDrillDownV1


class QuickStatsResponseV1(EnvelopeFields):
    data: QuickStatsV1
