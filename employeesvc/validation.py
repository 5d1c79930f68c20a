"""Validation of employee payloads and lenient JSON body parsing."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from typing import Any, TypeVar

from .models import Employee, EmployeeRequest, EmployeeStatus, GetEmployeeRequest

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_VALID_STATUSES = frozenset(status.value for status in EmployeeStatus)

T = TypeVar("T")


class ValidationError(ValueError):
    """Raised when a payload breaks one or more field rules."""

    def __init__(self, failures: Iterable[tuple[str, str]]):
        self.failures = tuple(failures)
        super().__init__(
            "; ".join(f"{name}: failed on the '{rule}' rule" for name, rule in self.failures)
        )

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.failures)


def _is_zero_time(value: datetime) -> bool:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value == _ZERO_TIME


def _person_failures(person: Employee | EmployeeRequest) -> Iterator[tuple[str, str]]:
    for name, value in (
        ("firstName", person.first_name),
        ("lastName", person.last_name),
        ("secondLastName", person.second_last_name),
    ):
        if not value:
            yield name, "required"
    for name, moment in (
        ("dateOfBirth", person.date_of_birth),
        ("dateOfEmployment", person.date_of_employment),
    ):
        if _is_zero_time(moment):
            yield name, "required"
    if person.status not in _VALID_STATUSES:
        yield "status", "EmployeeStatusValid"


def validate(obj: T) -> T:
    """Check obj against its field rules and return it, or raise ValidationError."""
    if isinstance(obj, (Employee, EmployeeRequest)):
        failures = list(_person_failures(obj))
    elif isinstance(obj, GetEmployeeRequest):
        failures = [] if obj.employee_id else [("employeeId", "required")]
    else:
        raise TypeError(f"cannot validate {type(obj).__name__}")
    if failures:
        raise ValidationError(failures)
    return obj


def parse_body(body: Any, model: type[T]) -> T:
    """Decode a JSON body into model; a missing or unreadable body gives an empty model."""
    if body is None:
        return model()
    raw = body.read() if hasattr(body, "read") else body
    try:
        return model.from_dict(json.loads(raw))  # type: ignore[attr-defined]
    except (ValueError, TypeError):
        return model()