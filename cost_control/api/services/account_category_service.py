# This file implements the account category catalog: filtered listing, secondary-key lookups, and writes.
# Codes are unique; duplicates surface as ConflictError, including ones that only the UNIQUE constraint catches.
# Deleting a category deactivates it so historical cost facts keep a valid reference.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from cost_control.api.api_config import ApiConfig
from cost_control.api.db_access import DatabaseClient
from cost_control.api.error_handlers import ConflictError, NotFoundError
from cost_control.api.schemas.account_category_schemas import (
    AccountCategoryCreate,
    AccountCategoryUpdate,
)

logger = logging.getLogger(__name__)

ACCOUNT_CATEGORY_TYPES: tuple[str, ...] = (
    "labor",
    "machinery",
    "materials",
    "fuel",
    "general_expenses",
)
DEFAULT_ACCOUNT_CATEGORY_TYPE = "general_expenses"

CATEGORY_COLUMNS = "id, code, name, type, group_name, active, created_at, updated_at"


def _duplicate_code(code: str) -> ConflictError:
    return ConflictError(
        "DUPLICATE_ACCOUNT_CATEGORY_CODE",
        f"An account category with code {code!r} already exists.",
    )


class AccountCategoryService:
    """Data retrieval and writes for account category routes."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.category_table = self.config.validate_table_name(
            self.config.account_category_table_name
        )

    def list_categories(
        self,
        *,
        active: bool | None = None,
        category_type: str | None = None,
        group_name: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        where_clauses: list[str] = ["1 = 1"]
        params: dict[str, Any] = {}

        if active is not None:
            where_clauses.append("active = :active")
            params["active"] = active
        if category_type:
            where_clauses.append("type = :type")
            params["type"] = category_type
        if group_name:
            where_clauses.append("group_name = :group_name")
            params["group_name"] = group_name
        if search:
            where_clauses.append("(LOWER(name) LIKE :search OR LOWER(code) LIKE :search)")
            params["search"] = f"%{search.strip().lower()}%"

        where_sql = " AND ".join(where_clauses)
        return self.db.fetch_all(
            f"""
            SELECT {CATEGORY_COLUMNS}
            FROM {self.category_table}
            WHERE {where_sql}
            ORDER BY type ASC, group_name ASC, code ASC
            """,
            params,
        )

    def list_active(self) -> list[dict[str, Any]]:
        return self.list_categories(active=True)

    def list_by_type(self, category_type: str) -> list[dict[str, Any]]:
        return self.list_categories(active=True, category_type=category_type)

    def list_by_group(self, group_name: str) -> list[dict[str, Any]]:
        return self.list_categories(active=True, group_name=group_name)

    def grouped_by_type(self) -> list[dict[str, Any]]:
        groups: dict[str, dict[str, Any]] = {}
        for row in self.list_active():
            bucket = groups.setdefault(row["type"], {"type": row["type"], "count": 0, "groups": set()})
            bucket["count"] += 1
            if row.get("group_name"):
                bucket["groups"].add(row["group_name"])

        return [
            {"type": bucket["type"], "count": bucket["count"], "groups": sorted(bucket["groups"])}
            for _, bucket in sorted(groups.items())
        ]

    def get(self, category_id: int) -> dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT {CATEGORY_COLUMNS} FROM {self.category_table} WHERE id = :category_id",
            {"category_id": category_id},
        )
        if row is None:
            raise NotFoundError("ACCOUNT_CATEGORY_NOT_FOUND", f"Account category not found: {category_id}")
        return row

    def get_by_code(self, code: str) -> dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT {CATEGORY_COLUMNS} FROM {self.category_table} WHERE code = :code",
            {"code": code},
        )
        if row is None:
            raise NotFoundError("ACCOUNT_CATEGORY_NOT_FOUND", f"Account category not found for code: {code}")
        return row

    def create(self, fields: AccountCategoryCreate) -> dict[str, Any]:
        code = fields.code.strip()
        self._ensure_code_available(code)

        try:
            created = self.db.execute_returning(
                f"""
                INSERT INTO {self.category_table} (code, name, type, group_name, active)
                VALUES (:code, :name, :type, :group_name, :active)
                RETURNING id
                """,
                {
                    "code": code,
                    "name": fields.name.strip(),
                    "type": fields.type or DEFAULT_ACCOUNT_CATEGORY_TYPE,
                    "group_name": fields.group_name.strip() if fields.group_name else None,
                    "active": True if fields.active is None else fields.active,
                },
            )
        except IntegrityError as exc:
            raise _duplicate_code(code) from exc
        if created is None:
            raise RuntimeError("Account category insert returned no identifier.")
        logger.info("Created account category %s (%s)", created["id"], code)
        return self.get(int(created["id"]))

    def update(self, category_id: int, fields: AccountCategoryUpdate) -> dict[str, Any]:
        current = self.get(category_id)
        updates = {key: value for key, value in fields.model_dump(exclude_unset=True).items() if value is not None}
        for key in ("code", "name", "group_name"):
            if key in updates:
                updates[key] = updates[key].strip()

        if "code" in updates and updates["code"] != current["code"]:
            self._ensure_code_available(updates["code"], exclude_id=category_id)
        if not updates:
            return current

        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        params = dict(updates)
        params["category_id"] = category_id
        try:
            self.db.execute(
                f"""
                UPDATE {self.category_table}
                SET {assignments}, updated_at = CURRENT_TIMESTAMP
                WHERE id = :category_id
                """,
                params,
            )
        except IntegrityError as exc:
            raise _duplicate_code(updates.get("code", current["code"])) from exc
        logger.info("Updated account category %s fields=%s", category_id, sorted(updates))
        return self.get(category_id)

    def deactivate(self, category_id: int) -> dict[str, Any]:
        self.get(category_id)
        self.db.execute(
            f"""
            UPDATE {self.category_table}
            SET active = :active, updated_at = CURRENT_TIMESTAMP
            WHERE id = :category_id
            """,
            {"active": False, "category_id": category_id},
        )
        logger.info("Deactivated account category %s", category_id)
        return self.get(category_id)

    def _ensure_code_available(self, code: str, exclude_id: int | None = None) -> None:
        query = f"SELECT id FROM {self.category_table} WHERE code = :code"
        params: dict[str, Any] = {"code": code}
        if exclude_id is not None:
            query += " AND id <> :exclude_id"
            params["exclude_id"] = exclude_id
        if self.db.fetch_one(query, params) is not None:
            raise _duplicate_code(code)
