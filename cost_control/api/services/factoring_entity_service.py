# This file implements the factoring entity registry used when financing receivables.
# Names are trimmed before storage and must be unique across the table.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from cost_control.api.api_config import ApiConfig
from cost_control.api.db_access import DatabaseClient
from cost_control.api.error_handlers import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

ENTITY_COLUMNS = "id, name, created_at"


def _duplicate_name(name: str) -> ConflictError:
    return ConflictError("DUPLICATE_FACTORING_ENTITY", f"A factoring entity named {name!r} already exists.")


class FactoringEntityService:
    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.entity_table = self.config.validate_table_name(self.config.factoring_entity_table_name)

    def list_entities(self) -> list[dict[str, Any]]:
        return self.db.fetch_all(
            f"SELECT {ENTITY_COLUMNS} FROM {self.entity_table} ORDER BY name ASC, id ASC"
        )

    def get(self, entity_id: int) -> dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT {ENTITY_COLUMNS} FROM {self.entity_table} WHERE id = :entity_id",
            {"entity_id": entity_id},
        )
        if row is None:
            raise NotFoundError("FACTORING_ENTITY_NOT_FOUND", f"Factoring entity not found: {entity_id}")
        return row

    def create(self, name: str) -> dict[str, Any]:
        clean_name = name.strip()
        self._ensure_name_available(clean_name)
        try:
            created = self.db.execute_returning(
                f"INSERT INTO {self.entity_table} (name) VALUES (:name) RETURNING id",
                {"name": clean_name},
            )
        except IntegrityError as exc:
            raise _duplicate_name(clean_name) from exc
        if created is None:
            raise RuntimeError("Factoring entity insert returned no identifier.")
        logger.info("Created factoring entity %s (%s)", created["id"], clean_name)
        return self.get(int(created["id"]))

    def rename(self, entity_id: int, name: str) -> dict[str, Any]:
        current = self.get(entity_id)
        clean_name = name.strip()
        if clean_name == current["name"]:
            return current

        self._ensure_name_available(clean_name, exclude_id=entity_id)
        try:
            self.db.execute(
                f"UPDATE {self.entity_table} SET name = :name WHERE id = :entity_id",
                {"name": clean_name, "entity_id": entity_id},
            )
        except IntegrityError as exc:
            raise _duplicate_name(clean_name) from exc
        logger.info("Renamed factoring entity %s", entity_id)
        return self.get(entity_id)

    def delete(self, entity_id: int) -> None:
        deleted = self.db.execute(
            f"DELETE FROM {self.entity_table} WHERE id = :entity_id",
            {"entity_id": entity_id},
        )
        if deleted == 0:
            raise NotFoundError("FACTORING_ENTITY_NOT_FOUND", f"Factoring entity not found: {entity_id}")
        logger.info("Deleted factoring entity %s", entity_id)

    def _ensure_name_available(self, name: str, exclude_id: int | None = None) -> None:
        query = f"SELECT id FROM {self.entity_table} WHERE name = :name"
        params: dict[str, Any] = {"name": name}
        if exclude_id is not None:
            query += " AND id <> :exclude_id"
            params["exclude_id"] = exclude_id
        if self.db.fetch_one(query, params) is not None:
            raise _duplicate_name(name)
