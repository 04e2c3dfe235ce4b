# This file implements milestone persistence and the derived project progress computation.
# Routers call these methods only after field validation passed; lookups raise NotFoundError.
# Progress is recomputed from the project's milestone rows on every request and never stored.

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from cost_control.api.api_config import ApiConfig
from cost_control.api.db_access import DatabaseClient
from cost_control.api.error_handlers import NotFoundError
from cost_control.api.schemas.milestone_schemas import MilestoneCreate, MilestoneUpdate

logger = logging.getLogger(__name__)

DEFAULT_MILESTONE_WEIGHT = 10.0
DEFAULT_MILESTONE_SEQUENCE = 10

MILESTONE_COLUMNS = (
    "id, project_id, name, description, planned_date, actual_date, amount, weight, "
    "sequence, is_completed, completion_date, created_at, updated_at"
)
UPDATABLE_COLUMNS = (
    "name",
    "description",
    "planned_date",
    "actual_date",
    "amount",
    "weight",
    "is_completed",
    "sequence",
)


def utc_today() -> date:
    return datetime.now(tz=UTC).date()


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    return float(value)


def summarize_progress(project_id: int, milestones: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Aggregate completion counts and weights for one project's milestones.

    ``weighted_ratio`` is completed weight over total weight and ``count_ratio``
    is completed count over total count; each is 0 when its denominator is 0.
    ``progress_percentage`` follows the weighted ratio, falling back to the
    count ratio when no milestone carries a positive weight.
    """

    total_count = 0
    completed_count = 0
    total_weight = 0.0
    completed_weight = 0.0

    for milestone in milestones:
        weight = _as_float(milestone.get("weight"))
        total_count += 1
        total_weight += weight
        if bool(milestone.get("is_completed")):
            completed_count += 1
            completed_weight += weight

    weighted_ratio = completed_weight / total_weight if total_weight > 0 else 0.0
    count_ratio = completed_count / total_count if total_count > 0 else 0.0
    headline_ratio = weighted_ratio if total_weight > 0 else count_ratio

    return {
        "project_id": project_id,
        "total_milestones": total_count,
        "completed_milestones": completed_count,
        "total_weight": total_weight,
        "completed_weight": completed_weight,
        "weighted_ratio": weighted_ratio,
        "count_ratio": count_ratio,
        "progress_percentage": round(headline_ratio * 100, 2),
    }


class MilestoneService:
    """Milestone CRUD, completion transition, and project progress."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.project_table = self.config.validate_table_name(self.config.project_table_name)
        self.milestone_table = self.config.validate_table_name(self.config.milestone_table_name)

    def ensure_project(self, project_id: int) -> None:
        row = self.db.fetch_one(
            f"SELECT id FROM {self.project_table} WHERE id = :project_id",
            {"project_id": project_id},
        )
        if row is None:
            raise NotFoundError("PROJECT_NOT_FOUND", f"Project not found: {project_id}")

    def list_for_project(self, project_id: int) -> list[dict[str, Any]]:
        self.ensure_project(project_id)
        return self.db.fetch_all(
            f"""
            SELECT {MILESTONE_COLUMNS}
            FROM {self.milestone_table}
            WHERE project_id = :project_id
            ORDER BY sequence ASC, planned_date ASC, id ASC
            """,
            {"project_id": project_id},
        )

    def get(self, milestone_id: int) -> dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT {MILESTONE_COLUMNS} FROM {self.milestone_table} WHERE id = :milestone_id",
            {"milestone_id": milestone_id},
        )
        if row is None:
            raise NotFoundError("MILESTONE_NOT_FOUND", f"Milestone not found: {milestone_id}")
        return row

    def create(self, project_id: int, fields: MilestoneCreate) -> dict[str, Any]:
        self.ensure_project(project_id)
        created = self.db.execute_returning(
            f"""
            INSERT INTO {self.milestone_table}
                (project_id, name, description, planned_date, amount, weight, sequence, is_completed)
            VALUES
                (:project_id, :name, :description, :planned_date, :amount, :weight, :sequence, :is_completed)
            RETURNING id
            """,
            {
                "project_id": project_id,
                "name": fields.name.strip(),
                "description": fields.description,
                "planned_date": fields.planned_date.isoformat(),
                "amount": fields.amount,
                "weight": DEFAULT_MILESTONE_WEIGHT if fields.weight is None else fields.weight,
                "sequence": DEFAULT_MILESTONE_SEQUENCE if fields.sequence is None else fields.sequence,
                "is_completed": False,
            },
        )
        if created is None:
            raise RuntimeError("Milestone insert returned no identifier.")
        milestone_id = int(created["id"])
        logger.info("Created milestone %s for project %s", milestone_id, project_id)
        return self.get(milestone_id)

    def update(self, milestone_id: int, fields: MilestoneUpdate) -> dict[str, Any]:
        current = self.get(milestone_id)
        changes = self._column_changes(current, fields.model_dump(exclude_unset=True))
        if not changes:
            return current

        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        params = dict(changes)
        params["milestone_id"] = milestone_id
        self.db.execute(
            f"""
            UPDATE {self.milestone_table}
            SET {assignments}, updated_at = CURRENT_TIMESTAMP
            WHERE id = :milestone_id
            """,
            params,
        )
        logger.info("Updated milestone %s fields=%s", milestone_id, sorted(changes))
        return self.get(milestone_id)

    def delete(self, milestone_id: int) -> None:
        deleted = self.db.execute(
            f"DELETE FROM {self.milestone_table} WHERE id = :milestone_id",
            {"milestone_id": milestone_id},
        )
        if deleted == 0:
            raise NotFoundError("MILESTONE_NOT_FOUND", f"Milestone not found: {milestone_id}")
        logger.info("Deleted milestone %s", milestone_id)

    def complete(self, milestone_id: int, completion_date: date | None = None) -> dict[str, Any]:
        current = self.get(milestone_id)
        if current["is_completed"] and completion_date is None:
            return current

        effective_date = (completion_date or utc_today()).isoformat()
        self.db.execute(
            f"""
            UPDATE {self.milestone_table}
            SET is_completed = :is_completed,
                completion_date = :completion_date,
                actual_date = COALESCE(actual_date, :completion_date),
                updated_at = CURRENT_TIMESTAMP
            WHERE id = :milestone_id
            """,
            {"is_completed": True, "completion_date": effective_date, "milestone_id": milestone_id},
        )
        logger.info("Completed milestone %s on %s", milestone_id, effective_date)
        return self.get(milestone_id)

    def progress(self, project_id: int) -> dict[str, Any]:
        self.ensure_project(project_id)
        rows = self.db.fetch_all(
            f"""
            SELECT id, weight, is_completed
            FROM {self.milestone_table}
            WHERE project_id = :project_id
            """,
            {"project_id": project_id},
        )
        return summarize_progress(project_id, rows)

    def _column_changes(self, current: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for column in UPDATABLE_COLUMNS:
            if column not in updates or updates[column] is None:
                continue
            value = updates[column]
            if isinstance(value, date):
                value = value.isoformat()
            elif column == "name":
                value = value.strip()
            changes[column] = value

        if "is_completed" in changes:
            if changes["is_completed"] and not current.get("completion_date"):
                changes["completion_date"] = utc_today().isoformat()
            elif not changes["is_completed"]:
                changes["completion_date"] = None
        return changes
