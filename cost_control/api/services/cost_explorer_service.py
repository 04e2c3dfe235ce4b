# This file implements read services over the flattened multidimensional cost view.
# Routers stay transport-focused while filtering, aggregation, and sort mapping live here.
# Sorting is allowlisted and always ends with a cost_id tiebreak so pages never overlap.

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

from cost_control.api.api_config import ApiConfig
from cost_control.api.db_access import DatabaseClient
from cost_control.api.error_handlers import NotFoundError
from cost_control.api.pagination import SortSpec

COST_SORT_FIELD_MAP: dict[str, str] = {
    "cost_date": "cost_date",
    "amount": "amount",
    "description": "description",
    "cost_center_name": "cost_center_name",
    "category_name": "category_name",
}

TRANSACTION_TYPES: tuple[str, ...] = ("expense", "income")

COST_FACT_COLUMNS = (
    "cost_id, transaction_type, cost_center_id, cost_center_code, cost_center_name, "
    "cost_center_type, cost_center_client, category_id, category_code, category_name, "
    "category_type, category_group, employee_id, employee_name, employee_position, "
    "employee_department, supplier_id, supplier_name, source_type, description, amount, "
    "cost_date, period_year, period_month, period_key"
)

TOP_EMPLOYEE_LIMIT = 10


@dataclass(frozen=True)
class CostFilters:
    """Optional filters accepted by the explore endpoint; None means unfiltered."""

    transaction_type: str | None = None
    cost_center_id: int | None = None
    cost_center_type: str | None = None
    category_id: int | None = None
    category_group: str | None = None
    employee_id: int | None = None
    employee_department: str | None = None
    supplier_id: int | None = None
    source_type: str | None = None
    period_year: int | None = None
    period_month: int | None = None
    amount_min: float | None = None
    amount_max: float | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None


@dataclass(frozen=True)
class PeriodFilters:
    date_from: date | None = None
    date_to: date | None = None
    period_year: int | None = None
    period_month: int | None = None


_EQUALITY_FILTERS = (
    "transaction_type",
    "cost_center_id",
    "cost_center_type",
    "category_id",
    "category_group",
    "employee_id",
    "employee_department",
    "supplier_id",
    "source_type",
    "period_year",
    "period_month",
)

_SEARCH_COLUMNS = (
    "description",
    "cost_center_name",
    "category_name",
    "employee_name",
    "supplier_name",
)


def _build_where(filters: CostFilters | PeriodFilters) -> tuple[list[str], dict[str, Any]]:
    where_clauses: list[str] = ["1 = 1"]
    params: dict[str, Any] = {}
    values = asdict(filters)

    for column in _EQUALITY_FILTERS:
        value = values.get(column)
        if value is not None and value != "":
            where_clauses.append(f"{column} = :{column}")
            params[column] = value

    if values.get("amount_min") is not None:
        where_clauses.append("amount >= :amount_min")
        params["amount_min"] = values["amount_min"]
    if values.get("amount_max") is not None:
        where_clauses.append("amount <= :amount_max")
        params["amount_max"] = values["amount_max"]
    if values.get("date_from") is not None:
        where_clauses.append("cost_date >= :date_from")
        params["date_from"] = values["date_from"].isoformat()
    if values.get("date_to") is not None:
        where_clauses.append("cost_date <= :date_to")
        params["date_to"] = values["date_to"].isoformat()

    search = (values.get("search") or "").strip()
    if search:
        like_sql = " OR ".join(f"LOWER({column}) LIKE :search" for column in _SEARCH_COLUMNS)
        where_clauses.append(f"({like_sql})")
        params["search"] = f"%{search.lower()}%"

    return where_clauses, params


def _to_float(value: Any) -> float:
    return float(value) if value is not None else 0.0


def _shape_totals(rows: list[dict[str, Any]], *keys: str) -> list[dict[str, Any]]:
    shaped: list[dict[str, Any]] = []
    for row in rows:
        item = dict(row)
        for key in keys:
            if key in item:
                item[key] = _to_float(item[key])
        shaped.append(item)
    return shaped


class CostExplorerService:
    """Filtering, dimension listing, and drill-down aggregation for cost facts."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.cost_table = self.config.validate_table_name(self.config.cost_fact_table_name)

    def explore(
        self,
        *,
        filters: CostFilters,
        page: int,
        page_size: int,
        sort: SortSpec,
    ) -> dict[str, Any]:
        where_clauses, params = _build_where(filters)
        where_sql = " AND ".join(where_clauses)
        order_sql = self._order_by_clause(sort)

        total_count = int(
            self.db.fetch_scalar(
                f"SELECT COUNT(*) FROM {self.cost_table} WHERE {where_sql}",
                params,
            )
            or 0
        )

        page_params = dict(params)
        page_params["limit"] = page_size
        page_params["offset"] = (page - 1) * page_size
        rows = self.db.fetch_all(
            f"""
            SELECT {COST_FACT_COLUMNS}
            FROM {self.cost_table}
            WHERE {where_sql}
            ORDER BY {order_sql}, cost_id DESC
            LIMIT :limit OFFSET :offset
            """,
            page_params,
        )
        return {"rows": _shape_totals(rows, "amount"), "total_count": total_count}

    def dimensions(
        self,
        *,
        transaction_type: str | None = None,
        cost_center_type: str | None = None,
    ) -> dict[str, list[dict[str, Any]]]:
        where_clauses, params = _build_where(
            CostFilters(transaction_type=transaction_type, cost_center_type=cost_center_type)
        )
        where_sql = " AND ".join(where_clauses)

        def grouped(columns: str, order_sql: str = "cost_count DESC") -> list[dict[str, Any]]:
            rows = self.db.fetch_all(
                f"""
                SELECT {columns}, COUNT(*) AS cost_count, SUM(amount) AS total_amount
                FROM {self.cost_table}
                WHERE {where_sql}
                GROUP BY {columns}
                ORDER BY {order_sql}
                """,
                params,
            )
            return _shape_totals(rows, "total_amount")

        return {
            "cost_centers": grouped(
                "cost_center_id, cost_center_code, cost_center_name, cost_center_type, cost_center_client"
            ),
            "categories": grouped("category_id, category_code, category_name, category_type, category_group"),
            "employees": grouped(
                "employee_id, employee_name, employee_position, employee_department"
            ),
            "suppliers": grouped("supplier_id, supplier_name"),
            "periods": grouped(
                "period_year, period_month, period_key",
                order_sql="period_year DESC, period_month DESC",
            ),
            "source_types": grouped("source_type"),
        }

    def drill_down_cost_center(self, cost_center_id: int, period: PeriodFilters) -> dict[str, Any]:
        cost_center = self.db.fetch_one(
            f"""
            SELECT cost_center_id, cost_center_code, cost_center_name, cost_center_type, cost_center_client
            FROM {self.cost_table}
            WHERE cost_center_id = :cost_center_id
            ORDER BY cost_id ASC
            LIMIT 1
            """,
            {"cost_center_id": cost_center_id},
        )
        if cost_center is None:
            raise NotFoundError("COST_CENTER_NOT_FOUND", f"No costs recorded for cost center: {cost_center_id}")

        where_clauses, params = _build_where(period)
        where_clauses.append("cost_center_id = :cost_center_id")
        params["cost_center_id"] = cost_center_id
        where_sql = " AND ".join(where_clauses)

        category_breakdown = self.db.fetch_all(
            f"""
            SELECT category_group, category_name, transaction_type,
                   COUNT(*) AS cost_count, SUM(amount) AS total_amount, AVG(amount) AS avg_amount
            FROM {self.cost_table}
            WHERE {where_sql}
            GROUP BY category_group, category_name, transaction_type
            ORDER BY total_amount DESC, category_name ASC
            """,
            params,
        )
        top_employees = self.db.fetch_all(
            f"""
            SELECT employee_name, employee_position, COUNT(*) AS cost_count, SUM(amount) AS total_amount
            FROM {self.cost_table}
            WHERE {where_sql} AND employee_id IS NOT NULL
            GROUP BY employee_name, employee_position
            ORDER BY total_amount DESC, employee_name ASC
            LIMIT {TOP_EMPLOYEE_LIMIT}
            """,
            params,
        )
        return {
            "cost_center": cost_center,
            "category_breakdown": _shape_totals(category_breakdown, "total_amount", "avg_amount"),
            "time_evolution": self._time_evolution(where_sql, params),
            "top_employees": _shape_totals(top_employees, "total_amount"),
        }

    def drill_down_category(self, category_id: int, period: PeriodFilters) -> dict[str, Any]:
        category = self.db.fetch_one(
            f"""
            SELECT category_id, category_code, category_name, category_type, category_group
            FROM {self.cost_table}
            WHERE category_id = :category_id
            ORDER BY cost_id ASC
            LIMIT 1
            """,
            {"category_id": category_id},
        )
        if category is None:
            raise NotFoundError("CATEGORY_NOT_FOUND", f"No costs recorded for category: {category_id}")

        where_clauses, params = _build_where(period)
        where_clauses.append("category_id = :category_id")
        params["category_id"] = category_id
        where_sql = " AND ".join(where_clauses)

        cost_center_breakdown = self.db.fetch_all(
            f"""
            SELECT cost_center_id, cost_center_name, cost_center_type, transaction_type,
                   COUNT(*) AS cost_count, SUM(amount) AS total_amount, AVG(amount) AS avg_amount
            FROM {self.cost_table}
            WHERE {where_sql}
            GROUP BY cost_center_id, cost_center_name, cost_center_type, transaction_type
            ORDER BY total_amount DESC, cost_center_name ASC
            """,
            params,
        )
        return {
            "category": category,
            "cost_center_breakdown": _shape_totals(cost_center_breakdown, "total_amount", "avg_amount"),
            "time_evolution": self._time_evolution(where_sql, params),
        }

    def quick_stats(self, *, period_year: int | None, period_month: int | None, cost_center_type: str | None) -> dict[str, Any]:
        where_clauses, params = _build_where(
            CostFilters(period_year=period_year, period_month=period_month, cost_center_type=cost_center_type)
        )
        where_sql = " AND ".join(where_clauses)
        row = self.db.fetch_one(
            f"""
            SELECT
                COUNT(*) AS total_transactions,
                COUNT(DISTINCT cost_center_id) AS unique_cost_centers,
                COUNT(DISTINCT employee_id) AS unique_employees,
                COUNT(DISTINCT supplier_id) AS unique_suppliers,
                SUM(CASE WHEN transaction_type = 'expense' THEN amount ELSE 0 END) AS total_expenses,
                SUM(CASE WHEN transaction_type = 'income' THEN amount ELSE 0 END) AS total_income,
                AVG(amount) AS avg_transaction,
                MAX(amount) AS max_transaction,
                MIN(amount) AS min_transaction
            FROM {self.cost_table}
            WHERE {where_sql}
            """,
            params,
        ) or {}

        stats = {
            "total_transactions": int(row.get("total_transactions") or 0),
            "unique_cost_centers": int(row.get("unique_cost_centers") or 0),
            "unique_employees": int(row.get("unique_employees") or 0),
            "unique_suppliers": int(row.get("unique_suppliers") or 0),
        }
        for key in ("total_expenses", "total_income", "avg_transaction", "max_transaction", "min_transaction"):
            stats[key] = _to_float(row.get(key))
        stats["net_result"] = stats["total_income"] - stats["total_expenses"]
        return stats

    def _time_evolution(self, where_sql: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        rows = self.db.fetch_all(
            f"""
            SELECT period_year, period_month, period_key, transaction_type,
                   COUNT(*) AS cost_count, SUM(amount) AS total_amount
            FROM {self.cost_table}
            WHERE {where_sql}
            GROUP BY period_year, period_month, period_key, transaction_type
            ORDER BY period_year ASC, period_month ASC, transaction_type ASC
            """,
            params,
        )
        return _shape_totals(rows, "total_amount")

    def _order_by_clause(self, sort: SortSpec) -> str:
        column = COST_SORT_FIELD_MAP[sort.field]
        direction = "ASC" if sort.order == "asc" else "DESC"
        return f"{column} {direction}"
