"""
Unit tests for project progress aggregation.
"""

from __future__ import annotations

from cost_control.api.services.milestone_service import summarize_progress


def test_weighted_ratio_uses_completed_weight() -> None:
    milestones = [
        {"weight": 2, "is_completed": False},
        {"weight": 3, "is_completed": False},
        {"weight": 5, "is_completed": True},
    ]

    progress = summarize_progress(7, milestones)

    assert progress["total_weight"] == 10.0
    assert progress["completed_weight"] == 5.0
    assert progress["weighted_ratio"] == 0.5
    assert progress["count_ratio"] == 1 / 3
    assert progress["progress_percentage"] == 50.0


def test_zero_milestones_return_all_zeros() -> None:
    progress = summarize_progress(7, [])

    assert progress == {
        "project_id": 7,
        "total_milestones": 0,
        "completed_milestones": 0,
        "total_weight": 0.0,
        "completed_weight": 0.0,
        "weighted_ratio": 0.0,
        "count_ratio": 0.0,
        "progress_percentage": 0.0,
    }


def test_zero_total_weight_falls_back_to_count_ratio() -> None:
    milestones = [
        {"weight": 0, "is_completed": True},
        {"weight": None, "is_completed": False},
    ]

    progress = summarize_progress(1, milestones)

    assert progress["weighted_ratio"] == 0.0
    assert progress["count_ratio"] == 0.5
    assert progress["progress_percentage"] == 50.0


def test_sqlite_style_flags_count_as_completed() -> None:
    progress = summarize_progress(1, [{"weight": 4, "is_completed": 1}, {"weight": 4, "is_completed": 0}])

    assert progress["completed_milestones"] == 1
