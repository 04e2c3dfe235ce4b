"""
Unit tests for the declarative field rule engine.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from cost_control.api.error_handlers import RequestValidationFailed
from cost_control.api.validation import (
    at_most,
    ensure_valid,
    evaluate_rules,
    in_range,
    is_boolean,
    is_date,
    is_int,
    is_length,
    is_numeric,
    is_string,
    non_negative,
    one_of,
    optional,
    parse_date,
    required,
    validate_body,
)

RULES = (
    required("name", is_string("name must be a string."), is_length(3, 10, "name length."), message="name is required."),
    required("plannedDate", is_date("plannedDate must be a date.")),
    optional("amount", is_numeric("amount must be a number."), non_negative("amount must be >= 0.")),
    optional("sequence", is_int("sequence must be an integer.")),
    optional("done", is_boolean("done must be a boolean.")),
    optional("kind", one_of(("a", "b"), "kind must be a or b.")),
)


def test_all_fields_are_reported_together() -> None:
    violations = evaluate_rules(RULES, {"name": 12, "amount": -1, "sequence": "1.5", "kind": "c"})

    assert [(item.field, item.message) for item in violations] == [
        ("name", "name must be a string."),
        ("plannedDate", "plannedDate is required."),
        ("amount", "amount must be >= 0."),
        ("sequence", "sequence must be an integer."),
        ("kind", "kind must be a or b."),
    ]


def test_checks_stop_at_first_failure_within_a_field() -> None:
    violations = evaluate_rules(RULES, {"name": "ok name", "plannedDate": "2024-01-01", "amount": "lots"})

    assert [(item.field, item.message) for item in violations] == [("amount", "amount must be a number.")]


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_optional_fields_are_skipped(blank: object) -> None:
    payload = {"name": "valid", "plannedDate": "2024-01-01", "amount": blank, "done": blank}

    assert evaluate_rules(RULES, payload) == []


def test_ensure_valid_returns_declared_non_blank_fields() -> None:
    payload = {"name": "valid", "plannedDate": "2024-01-01", "amount": "", "extra": "ignored"}

    assert ensure_valid(RULES, payload) == {"name": "valid", "plannedDate": "2024-01-01"}


def test_ensure_valid_raises_with_itemized_errors() -> None:
    with pytest.raises(RequestValidationFailed) as excinfo:
        ensure_valid(RULES, {"name": "valid"})

    assert excinfo.value.status_code == 400
    assert excinfo.value.errors == [
        {"field": "plannedDate", "message": "plannedDate is required.", "location": "body"}
    ]


def test_ensure_valid_rejects_non_object_payload() -> None:
    with pytest.raises(RequestValidationFailed) as excinfo:
        ensure_valid(RULES, "name=valid")

    assert excinfo.value.errors[0]["field"] == "body"


@pytest.mark.parametrize("value", ["2024-02-30", "2024/02/01", "20240201", 20240201, " 2024-02-01", "2024-02-01\n"])
def test_parse_date_rejects_invalid_calendar_values(value: object) -> None:
    assert parse_date(value) is None


def test_boolean_and_numeric_checks_reject_booleans_as_numbers() -> None:
    numeric_check, _ = is_numeric("x")
    int_check, _ = is_int("x")
    bool_check, _ = is_boolean("x")

    assert numeric_check(True) is False
    assert int_check(False) is False
    assert int_check(4.0) is True
    assert bool_check("TRUE") is True
    assert bool_check(" true") is False
    assert bool_check("sometimes") is False


@pytest.mark.parametrize("value", [" 5", "5 ", "\t1.5"])
def test_numeric_checks_reject_whitespace_padded_strings(value: str) -> None:
    numeric_check, _ = is_numeric("x")
    int_check, _ = is_int("x")

    assert numeric_check(value) is False
    assert int_check(value) is False


def test_range_checks_bound_large_values() -> None:
    cap_check, _ = at_most(99_999.99, "x")
    span_check, _ = in_range(-10, 10, "x")

    assert cap_check("99999.99") is True
    assert cap_check(100_000) is False
    assert span_check(10**30) is False
    assert span_check(-10) is True
    assert span_check("nan") is False


class _Toggle(BaseModel):
    flag: bool


def test_validate_body_reports_model_rejections_as_itemized_errors() -> None:
    with pytest.raises(RequestValidationFailed) as excinfo:
        validate_body((optional("flag"),), {"flag": "sometimes"}, _Toggle)

    assert excinfo.value.status_code == 400
    assert [item["field"] for item in excinfo.value.errors] == ["flag"]
    assert excinfo.value.errors[0]["location"] == "body"


def test_validate_body_builds_model_from_cleaned_fields() -> None:
    toggle = validate_body((optional("flag", is_boolean("flag must be a boolean.")),), {"flag": "yes", "x": 1}, _Toggle)

    assert toggle == _Toggle(flag=True)
