"""Employee records and the request bodies of the employee API."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class EmployeeStatus(str, Enum):
    """Employment status accepted by the API."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z"
)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339, trimming trailing fractional zeros."""
    value = _aware(value)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.match(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    lowered = key.lower()
    return next(
        (value for name, value in data.items() if isinstance(name, str) and name.lower() == lowered),
        None,
    )


def _string_field(data: Mapping[str, Any], key: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _time_field(data: Mapping[str, Any], key: str) -> datetime:
    value = _lookup(data, key)
    if value is None:
        return _ZERO_TIME
    if isinstance(value, datetime):
        return _aware(value)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a timestamp string")
    return _parse_time(value)


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    return data


def _status_text(status: Any) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _person_dict(person: Employee | EmployeeRequest) -> dict[str, Any]:
    return {
        "firstName": person.first_name,
        "lastName": person.last_name,
        "secondLastName": person.second_last_name,
        "dateOfBirth": _format_time(person.date_of_birth),
        "dateOfEmployment": _format_time(person.date_of_employment),
        "status": _status_text(person.status),
    }


def _person_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "first_name": _string_field(data, "firstName"),
        "last_name": _string_field(data, "lastName"),
        "second_last_name": _string_field(data, "secondLastName"),
        "date_of_birth": _time_field(data, "dateOfBirth"),
        "date_of_employment": _time_field(data, "dateOfEmployment"),
        "status": _string_field(data, "status"),
    }


@dataclass
class Employee:
    """A stored employee."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    second_last_name: str = ""
    date_of_birth: datetime = _ZERO_TIME
    date_of_employment: datetime = _ZERO_TIME
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping with the API's field names."""
        return {"id": self.id, **_person_dict(self)}

    def to_json(self) -> str:
        return _dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Employee:
        """Build an employee from decoded JSON; unknown keys are ignored."""
        data = _require_mapping(data)
        return cls(id=_string_field(data, "id"), **_person_kwargs(data))


@dataclass
class EmployeeRequest:
    """Body of a create or update request."""

    first_name: str = ""
    last_name: str = ""
    second_last_name: str = ""
    date_of_birth: datetime = _ZERO_TIME
    date_of_employment: datetime = _ZERO_TIME
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _person_dict(self)

    def to_json(self) -> str:
        return _dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmployeeRequest:
        """Build a request from decoded JSON; unknown keys are ignored."""
        return cls(**_person_kwargs(_require_mapping(data)))


@dataclass
class GetEmployeeRequest:
    """Request naming a single employee."""

    employee_id: str = ""

    def to_json(self) -> str:
        return _dumps({"employeeId": self.employee_id})