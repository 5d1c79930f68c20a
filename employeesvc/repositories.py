"""Storage of employee records."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import closing
from datetime import datetime, timezone
from typing import Any

from .models import Employee, EmployeeStatus

logger = logging.getLogger(__name__)

_JSON_KEYS = (
    "id",
    "firstName",
    "lastName",
    "secondLastName",
    "dateOfBirth",
    "dateOfEmployment",
    "status",
)


class RecordNotFoundError(LookupError):
    """Raised when no stored employee matches the requested id."""

    def __init__(self, message: str = "no rows in result set"):
        super().__init__(message)


class EmployeeRepository(ABC):
    """Persistence operations on employees."""

    @abstractmethod
    def create(self, employee: Employee) -> Employee: ...

    @abstractmethod
    def find_all(self) -> list[Employee]: ...

    @abstractmethod
    def find_by_id(self, employee_id: str) -> Employee: ...

    @abstractmethod
    def delete_by_id(self, employee_id: str) -> int: ...

    @abstractmethod
    def update(self, employee: Employee) -> int: ...


class SqlEmployeeRepository(EmployeeRepository):
    """Repository over a DB-API connection using qmark parameters."""

    _CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS employees (
            id_employee TEXT PRIMARY KEY,
            first_name TEXT,
            last_name TEXT,
            second_last_name TEXT,
            date_of_birth DATE,
            date_of_employment DATE,
            status TEXT
        )"""
    _INSERT = """
        INSERT INTO employees (
            id_employee, first_name, last_name, second_last_name,
            date_of_birth, date_of_employment, status)
        VALUES (?, ?, ?, ?, ?, ?, ?)"""
    _SELECT = """
        SELECT id_employee, first_name, last_name, second_last_name,
               date_of_birth, date_of_employment, status
        FROM employees"""
    _DELETE = "DELETE FROM employees WHERE id_employee = ?"
    _UPDATE = """
        UPDATE employees SET
            first_name = ?,
            last_name = ?,
            second_last_name = ?,
            date_of_birth = ?,
            date_of_employment = ?,
            status = ?
        WHERE id_employee = ?"""

    def __init__(self, connection: Any, init_db: bool):
        self.connection = connection
        if init_db:
            self.create_table()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(sql, params)
            count = cursor.rowcount
        self.connection.commit()
        return count

    def create_table(self) -> None:
        """Create the employees table; a failure is logged and otherwise ignored."""
        try:
            self._execute(self._CREATE_TABLE)
        except Exception:
            logger.exception("Unable to create the table")

    def create(self, employee: Employee) -> Employee:
        data = employee.to_dict()
        self._execute(self._INSERT, tuple(data[key] for key in _JSON_KEYS))
        logger.info("New record ID is: %s", employee.id)
        return employee

    def find_all(self) -> list[Employee]:
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(self._SELECT)
            rows = cursor.fetchall()
        employees = []
        for row in rows:
            try:
                employees.append(Employee.from_dict(dict(zip(_JSON_KEYS, row))))
            except ValueError:
                logger.warning("Skipping unreadable employee row: %r", row)
        return employees

    def find_by_id(self, employee_id: str) -> Employee:
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(self._SELECT + " WHERE id_employee = ?", (employee_id,))
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError()
        return Employee.from_dict(dict(zip(_JSON_KEYS, row)))

    def delete_by_id(self, employee_id: str) -> int:
        return self._execute(self._DELETE, (employee_id,))

    def update(self, employee: Employee) -> int:
        data = employee.to_dict()
        params = tuple(data[key] for key in _JSON_KEYS[1:]) + (data["id"],)
        count = self._execute(self._UPDATE, params)
        logger.info("Rows affected: %d", count)
        return count


class EmployeeRepositoryStub(EmployeeRepository):
    """In-memory stand-in that returns fixed employees and reports success."""

    @staticmethod
    def _sample(employee_id: str, first_name: str, born: datetime) -> Employee:
        return Employee(
            id=employee_id,
            first_name=first_name,
            last_name="Luna",
            second_last_name="Valdez",
            date_of_birth=born,
            date_of_employment=datetime.now(timezone.utc),
            status=EmployeeStatus.ACTIVE,
        )

    def create(self, employee: Employee) -> Employee:
        return employee

    def find_all(self) -> list[Employee]:
        return [
            self._sample("1", "Marcos", datetime(1994, 4, 25, 8, tzinfo=timezone.utc)),
            self._sample("2", "Gerardo", datetime(1999, 11, 8, 8, tzinfo=timezone.utc)),
        ]

    def find_by_id(self, employee_id: str) -> Employee:
        return self._sample(employee_id, "Marcos", datetime(1994, 4, 25, 8, tzinfo=timezone.utc))

    def delete_by_id(self, employee_id: str) -> int:
        return 1

    def update(self, employee: Employee) -> int:
        return 1