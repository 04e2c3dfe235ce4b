# This file tests cost exploration endpoints for pagination metadata, sorting, and filter validation.
# A capturing fake service records what the router passed down.

from __future__ import annotations

from datetime import date
from typing import Any

from cost_control.api.error_handlers import NotFoundError
from cost_control.api.services.cost_explorer_service import CostFilters, PeriodFilters
from tests.api.support import AUTH_HEADERS, api_test_client


def _cost_row(cost_id: int) -> dict[str, Any]:
    return {
        "cost_id": cost_id,
        "transaction_type": "expense",
        "cost_center_id": 3,
        "cost_center_code": "CC-3",
        "cost_center_name": "North Bridge",
        "cost_center_type": "project",
        "cost_center_client": "City Council",
        "category_id": 11,
        "category_code": "LAB-01",
        "category_name": "Crew wages",
        "category_type": "labor",
        "category_group": "Direct labor",
        "employee_id": 5,
        "employee_name": "R. Soto",
        "employee_position": "Foreman",
        "employee_department": "Field",
        "supplier_id": None,
        "supplier_name": None,
        "source_type": "payroll",
        "description": "Weekly payroll",
        "amount": 1500.0,
        "cost_date": date(2024, 3, 8),
        "period_year": 2024,
        "period_month": 3,
        "period_key": "2024-03",
    }


class CapturingCostService:
    def __init__(self) -> None:
        self.last_kwargs: dict[str, Any] = {}
        self.last_period: PeriodFilters | None = None

    def explore(self, **kwargs: Any) -> dict[str, Any]:
        self.last_kwargs = kwargs
        return {"rows": [_cost_row(9), _cost_row(8)], "total_count": 5}

    def dimensions(self, **kwargs: Any) -> dict[str, Any]:
        self.last_kwargs = kwargs
        return {
            "cost_centers": [],
            "categories": [],
            "employees": [],
            "suppliers": [],
            "periods": [{"period_year": 2024, "period_month": 3, "period_key": "2024-03", "cost_count": 2, "total_amount": 3000.0}],
            "source_types": [{"source_type": "payroll", "cost_count": 2, "total_amount": 3000.0}],
        }

    def drill_down_cost_center(self, cost_center_id: int, period: PeriodFilters) -> dict[str, Any]:
        self.last_period = period
        if cost_center_id != 3:
            raise NotFoundError("COST_CENTER_NOT_FOUND", "No costs recorded")
        return {
            "cost_center": {"cost_center_id": 3, "cost_center_name": "North Bridge"},
            "category_breakdown": [],
            "time_evolution": [],
            "top_employees": [],
        }

    def drill_down_category(self, category_id: int, period: PeriodFilters) -> dict[str, Any]:
        self.last_period = period
        return {
            "category": {"category_id": category_id, "category_name": "Crew wages"},
            "cost_center_breakdown": [],
            "time_evolution": [],
        }

    def quick_stats(self, **kwargs: Any) -> dict[str, Any]:
        self.last_kwargs = kwargs
        return {
            "total_transactions": 2,
            "unique_cost_centers": 1,
            "unique_employees": 1,
            "unique_suppliers": 0,
            "total_expenses": 3000.0,
            "total_income": 0.0,
            "net_result": -3000.0,
            "avg_transaction": 1500.0,
            "max_transaction": 1500.0,
            "min_transaction": 1500.0,
        }


def test_explore_returns_pagination_metadata() -> None:
    service = CapturingCostService()
    with api_test_client(cost_explorer_service=service) as client:
        response = client.get(
            "/api/v1/costs/explore",
            params={"page": 2, "page_size": 2, "sort": "amount:asc"},
            headers=AUTH_HEADERS,
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["pagination"] == {
        "page": 2,
        "page_size": 2,
        "total_count": 5,
        "total_pages": 3,
        "has_next": True,
        "has_prev": True,
        "sort": "amount:asc",
    }
    assert payload["data"][0]["costId"] == 9
    assert payload["data"][0]["costDate"] == "2024-03-08"
    assert service.last_kwargs["page"] == 2
    assert service.last_kwargs["sort"].field == "amount"


def test_explore_uses_default_sort_and_page_size() -> None:
    service = CapturingCostService()
    with api_test_client(cost_explorer_service=service) as client:
        response = client.get("/api/v1/costs/explore", headers=AUTH_HEADERS)

    assert response.status_code == 200
    pagination = response.json()["pagination"]
    assert pagination["sort"] == "cost_date:desc"
    assert pagination["page_size"] == 2
    assert pagination["has_prev"] is False


def test_explore_passes_filters_to_service() -> None:
    service = CapturingCostService()
    with api_test_client(cost_explorer_service=service) as client:
        client.get(
            "/api/v1/costs/explore",
            params={
                "transaction_type": "expense",
                "cost_center_id": 3,
                "period_year": 2024,
                "date_from": "2024-03-01",
                "date_to": "2024-03-31",
                "search": "payroll",
            },
            headers=AUTH_HEADERS,
        )

    filters = service.last_kwargs["filters"]
    assert isinstance(filters, CostFilters)
    assert filters.transaction_type == "expense"
    assert filters.cost_center_id == 3
    assert filters.date_from == date(2024, 3, 1)
    assert filters.search == "payroll"


def test_explore_rejects_invalid_query_parameters() -> None:
    with api_test_client(cost_explorer_service=CapturingCostService()) as client:
        bad_sort = client.get("/api/v1/costs/explore", params={"sort": "employee_name:asc"}, headers=AUTH_HEADERS)
        bad_size = client.get("/api/v1/costs/explore", params={"page_size": 50}, headers=AUTH_HEADERS)
        bad_page = client.get("/api/v1/costs/explore", params={"page": 0}, headers=AUTH_HEADERS)
        bad_type = client.get("/api/v1/costs/explore", params={"transaction_type": "gift"}, headers=AUTH_HEADERS)
        bad_amounts = client.get(
            "/api/v1/costs/explore",
            params={"amount_min": 10, "amount_max": 5},
            headers=AUTH_HEADERS,
        )
        bad_window = client.get(
            "/api/v1/costs/explore",
            params={"date_from": "2024-04-01", "date_to": "2024-03-01"},
            headers=AUTH_HEADERS,
        )

    for response in (bad_sort, bad_size, bad_page, bad_type, bad_amounts):
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_QUERY_PARAM"
    assert bad_window.status_code == 400
    assert bad_window.json()["error_code"] == "INVALID_DATE_WINDOW"


def test_dimensions_and_quick_stats() -> None:
    service = CapturingCostService()
    with api_test_client(cost_explorer_service=service) as client:
        dimensions = client.get(
            "/api/v1/costs/dimensions", params={"transaction_type": "expense"}, headers=AUTH_HEADERS
        )
        stats = client.get("/api/v1/costs/quick-stats", params={"period_year": 2024}, headers=AUTH_HEADERS)

    assert dimensions.status_code == 200
    assert dimensions.json()["data"]["periods"][0]["periodKey"] == "2024-03"
    assert stats.status_code == 200
    assert stats.json()["data"]["netResult"] == -3000.0
    assert service.last_kwargs == {"period_year": 2024, "period_month": None, "cost_center_type": None}


def test_drill_down_cost_center_and_category() -> None:
    service = CapturingCostService()
    with api_test_client(cost_explorer_service=service) as client:
        found = client.get(
            "/api/v1/costs/drill-down/cost-center/3",
            params={"period_year": 2024},
            headers=AUTH_HEADERS,
        )
        assert service.last_period == PeriodFilters(period_year=2024)
        missing = client.get("/api/v1/costs/drill-down/cost-center/4", headers=AUTH_HEADERS)
        category = client.get("/api/v1/costs/drill-down/category/11", headers=AUTH_HEADERS)

    assert found.status_code == 200
    assert found.json()["data"]["costCenter"]["costCenterName"] == "North Bridge"
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "COST_CENTER_NOT_FOUND"
    assert category.json()["data"]["category"]["categoryId"] == 11
