"""Employee, client and user services."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from .models import Employee, EmployeeRequest
from .repositories import EmployeeRepository
from .utils import get_env

logger = logging.getLogger(__name__)

_CLIENT_ID_VAR = "OAUTH_CLIENT_ID"
_CLIENT_CREDENTIAL_VAR = "OAUTH_CLIENT_SECRET"
_USER_ID_VAR = "OAUTH_USER_ID"
_USER_NAME_VAR = "OAUTH_USER_NAME"
_USER_CREDENTIAL_VAR = "OAUTH_USER_PASSWORD"


def _configured(value: str | None, env_name: str, fallback: str) -> str:
    """Return value when given, otherwise the environment setting or fallback."""
    return value if value is not None else get_env(env_name, fallback)


class EmployeeNotFoundError(LookupError):
    """Raised when an employee to update or delete does not exist."""

    def __init__(self, message: str = "employee not Found"):
        super().__init__(message)


class InvalidCredentialsError(ValueError):
    """Raised when client or user credentials do not match."""


class EmployeeService:
    """Business operations on employees, backed by a repository."""

    def __init__(self, repository: EmployeeRepository):
        self.repository = repository

    def create_employee(self, request: EmployeeRequest) -> Employee:
        """Store a new employee with a freshly generated id."""
        employee = Employee(
            id=str(uuid.uuid4()),
            first_name=request.first_name,
            last_name=request.last_name,
            second_last_name=request.second_last_name,
            date_of_birth=request.date_of_birth,
            date_of_employment=request.date_of_employment,
            status=request.status,
        )
        logger.info("employee: %s", employee.to_json())
        return self.repository.create(employee)

    def get_employees(self) -> list[Employee]:
        return self.repository.find_all()

    def get_employee_by_id(self, employee_id: str) -> Employee:
        return self.repository.find_by_id(employee_id)

    def update_employee(self, employee_id: str, request: EmployeeRequest) -> Employee:
        """Replace the details of an existing employee and return the result."""
        try:
            current = self.repository.find_by_id(employee_id)
        except Exception as exc:
            raise EmployeeNotFoundError() from exc

        updated = replace(
            current,
            first_name=request.first_name,
            last_name=request.last_name,
            second_last_name=request.second_last_name,
            date_of_birth=request.date_of_birth,
            date_of_employment=request.date_of_employment,
            status=request.status,
        )
        logger.info("employee: %s", updated.to_json())

        try:
            count = self.repository.update(updated)
        except Exception:
            logger.exception("Unable to update the employee")
            count = 0
        if count <= 0:
            raise EmployeeNotFoundError()
        return updated

    def delete_employee_by_id(self, employee_id: str) -> None:
        try:
            count = self.repository.delete_by_id(employee_id)
        except Exception:
            logger.exception("Unable to delete the employee")
            count = 0
        if count <= 0:
            raise EmployeeNotFoundError()


class ClientService:
    """Checks OAuth client credentials against the configured pair."""

    def __init__(self, client_id: str | None = None, client_secret: str | None = None):
        self.client_id = _configured(client_id, _CLIENT_ID_VAR, "client")
        self.client_secret = _configured(client_secret, _CLIENT_CREDENTIAL_VAR, "password")

    def is_valid_client_credentials(self, client: str, password: str) -> bool:
        """Return True for matching credentials, otherwise raise InvalidCredentialsError."""
        if client != self.client_id:
            raise InvalidCredentialsError("invalid client id")
        if password != self.client_secret:
            raise InvalidCredentialsError("invalid client secret")
        return True


class UserService:
    """Resolves the configured user's id from a user name and password."""

    def __init__(
        self,
        user_id: str | None = None,
        user_name: str | None = None,
        password: str | None = None,
    ):
        self.user_id = _configured(user_id, _USER_ID_VAR, "000000")
        self.user_name = _configured(user_name, _USER_NAME_VAR, "user")
        self.password = _configured(password, _USER_CREDENTIAL_VAR, "secret")

    def get_user_id(self, user_name: str, password: str) -> str:
        if user_name != self.user_name:
            raise InvalidCredentialsError("invalid username")
        if password != self.password:
            raise InvalidCredentialsError("invalid password")
        return self.user_id