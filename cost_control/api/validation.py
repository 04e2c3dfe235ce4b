# This file implements the declarative field rules evaluated before any handler touches storage.
# A rule set is a tuple of FieldSpec entries; each entry lists (predicate, message) checks in order.
# Every field is evaluated independently and all violations are reported together as one 400.

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from cost_control.api.error_handlers import RequestValidationFailed

Predicate = Callable[[Any], bool]
Check = tuple[Predicate, str]
ModelT = TypeVar("ModelT", bound=BaseModel)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Type checks coerce with the same pydantic types the request models declare.
_BOOL: TypeAdapter[bool] = TypeAdapter(bool)
_INT: TypeAdapter[int] = TypeAdapter(int)
_FLOAT: TypeAdapter[float] = TypeAdapter(float)
_DATE: TypeAdapter[date] = TypeAdapter(date)


@dataclass(frozen=True)
class FieldSpec:
    """Rules for one named field of a request payload."""

    name: str
    required: bool = False
    checks: tuple[Check, ...] = ()
    required_message: str | None = None


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str
    location: str = "body"

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "location": self.location}


def required(name: str, *checks: Check, message: str | None = None) -> FieldSpec:
    return FieldSpec(name=name, required=True, checks=checks, required_message=message)


def optional(name: str, *checks: Check) -> FieldSpec:
    return FieldSpec(name=name, required=False, checks=checks)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def _padded(value: Any) -> bool:
    return isinstance(value, str) and value != value.strip()


def _coerce(adapter: TypeAdapter[Any], value: Any) -> tuple[bool, Any]:
    try:
        return True, adapter.validate_python(value)
    except ValidationError:
        return False, None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or _padded(value):
        return None
    ok, number = _coerce(_FLOAT, value)
    if not ok or math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_date(value: Any) -> date | None:
    """Return a calendar date for `YYYY-MM-DD` strings or date objects, else None."""

    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        return None
    ok, parsed = _coerce(_DATE, value)
    return parsed if ok else None


def is_string(message: str) -> Check:
    return (lambda value: isinstance(value, str), message)


def is_length(min_length: int, max_length: int, message: str) -> Check:
    def _check(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return min_length <= len(value.strip()) <= max_length

    return (_check, message)


def is_date(message: str) -> Check:
    return (lambda value: parse_date(value) is not None, message)


def is_numeric(message: str) -> Check:
    return (lambda value: _as_number(value) is not None, message)


def non_negative(message: str) -> Check:
    def _check(value: Any) -> bool:
        number = _as_number(value)
        return number is not None and number >= 0

    return (_check, message)


def at_most(maximum: float, message: str) -> Check:
    def _check(value: Any) -> bool:
        number = _as_number(value)
        return number is not None and number <= maximum

    return (_check, message)


def in_range(minimum: float, maximum: float, message: str) -> Check:
    def _check(value: Any) -> bool:
        number = _as_number(value)
        return number is not None and minimum <= number <= maximum

    return (_check, message)


def is_int(message: str) -> Check:
    def _check(value: Any) -> bool:
        if isinstance(value, bool) or _padded(value):
            return False
        return _coerce(_INT, value)[0]

    return (_check, message)


def is_boolean(message: str) -> Check:
    return (lambda value: _coerce(_BOOL, value)[0], message)


def one_of(allowed: Iterable[str], message: str) -> Check:
    allowed_values = frozenset(allowed)
    return (lambda value: isinstance(value, str) and value in allowed_values, message)


def evaluate_rules(rule_set: Iterable[FieldSpec], payload: Mapping[str, Any]) -> list[FieldViolation]:
    """Evaluate every field spec against the payload and collect all violations."""

    violations: list[FieldViolation] = []
    for spec in rule_set:
        value = payload.get(spec.name)
        if is_blank(value):
            if spec.required:
                violations.append(
                    FieldViolation(
                        field=spec.name,
                        message=spec.required_message or f"{spec.name} is required.",
                    )
                )
            continue
        for predicate, message in spec.checks:
            if not predicate(value):
                violations.append(FieldViolation(field=spec.name, message=message))
                break
    return violations


def ensure_valid(rule_set: Iterable[FieldSpec], payload: Any) -> dict[str, Any]:
    """Validate a request body and return its declared, non-blank fields.

    Raises ``RequestValidationFailed`` with the itemized violations when any
    rule fails. The payload itself is never modified.
    """

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise RequestValidationFailed(
            [FieldViolation(field="body", message="Request body must be a JSON object.").as_dict()]
        )

    specs = tuple(rule_set)
    violations = evaluate_rules(specs, payload)
    if violations:
        raise RequestValidationFailed([violation.as_dict() for violation in violations])

    return {
        spec.name: payload[spec.name]
        for spec in specs
        if spec.name in payload and not is_blank(payload[spec.name])
    }


def _model_violations(exc: ValidationError) -> list[dict[str, str]]:
    violations: list[dict[str, str]] = []
    for item in exc.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "body"
        violations.append(FieldViolation(field=field, message=str(item.get("msg", "Invalid value."))).as_dict())
    return violations


def validate_body(rule_set: Iterable[FieldSpec], payload: Any, model: type[ModelT]) -> ModelT:
    """Run the rule set, then build the request model from the cleaned fields.

    Anything the model still rejects is reported with the same itemized 400
    shape as a failed rule.
    """

    cleaned = ensure_valid(rule_set, payload)
    try:
        return model.model_validate(cleaned)
    except ValidationError as exc:
        raise RequestValidationFailed(_model_violations(exc)) from exc
