"""HTTP application: employee CRUD, health check and OAuth token endpoints."""

from __future__ import annotations

import gzip
import json
import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, request

from .auth import DEFAULT_SKIPPED_PATHS, AuthConfig, OAuthService, TokenError, decode_basic_auth
from .models import EmployeeRequest
from .services import ClientService, EmployeeService, InvalidCredentialsError, UserService
from .utils import get_basic_auth, get_bearer_auth, get_env
from .validation import ValidationError, validate

logger = logging.getLogger(__name__)

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})

_CORS_ALLOW_HEADERS = ", ".join(
    (
        "Origin",
        "Accept",
        "Content-Type",
        "Content-Length",
        "Accept-Encoding",
        "Authorization",
        "X-CSRF-Token",
    )
)
_CORS_ALLOW_METHODS = ", ".join(("POST", "GET", "OPTIONS", "PUT", "DELETE"))


class _BindError(Exception):
    """Raised when a request body cannot be bound to a request object."""

    def __init__(self, status: HTTPStatus, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def _parse_bool(text: str) -> bool:
    """Read a boolean the way the service's configuration expects; anything else is false."""
    return text in _TRUE_WORDS


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _json(payload: Any, status: int) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def _bind_employee_request() -> EmployeeRequest:
    raw = request.get_data()
    if not raw:
        return EmployeeRequest()
    if not request.is_json:
        raise _BindError(HTTPStatus.UNSUPPORTED_MEDIA_TYPE, HTTPStatus.UNSUPPORTED_MEDIA_TYPE.phrase)
    try:
        return EmployeeRequest.from_dict(json.loads(raw))
    except (ValueError, TypeError) as exc:
        raise _BindError(HTTPStatus.BAD_REQUEST, str(exc)) from exc


def _enable_cors(app: Flask) -> None:
    @app.before_request
    def _preflight() -> Response | None:
        if request.method != "OPTIONS":
            return None
        response = Response(status=HTTPStatus.NO_CONTENT)
        response.vary.update(("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers"))
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = _CORS_ALLOW_METHODS
            response.headers["Access-Control-Allow-Headers"] = _CORS_ALLOW_HEADERS
        return response

    @app.after_request
    def _cors_headers(response: Response) -> Response:
        response.vary.add("Origin")
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Credentials"] = "true"
        return response


def _enable_auth(app: Flask, config: AuthConfig) -> None:
    @app.before_request
    def _require_token() -> Response | None:
        if not config.enable_auth or config.is_skipped_path(request.path):
            return None
        if get_bearer_auth(request.headers) is None:
            return _json({"message": "missing or malformed jwt"}, HTTPStatus.BAD_REQUEST)
        try:
            config.authenticate(request.path, request.headers)
        except TokenError as exc:
            logger.info("Rejected token: %s", exc)
            return _json({"message": "invalid or expired jwt"}, HTTPStatus.UNAUTHORIZED)
        return None


def _enable_gzip(app: Flask) -> None:
    @app.after_request
    def _compress(response: Response) -> Response:
        if "swagger" in request.path:
            return response
        if "gzip" not in request.headers.get("Accept-Encoding", "").lower():
            return response
        if response.direct_passthrough or "Content-Encoding" in response.headers:
            return response
        body = response.get_data()
        if not body:
            return response
        response.set_data(gzip.compress(body))
        response.headers["Content-Encoding"] = "gzip"
        response.vary.add("Accept-Encoding")
        return response


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(_BindError)
    def _bind_failed(exc: _BindError) -> Response:
        return _json({"message": exc.message}, exc.status)

    def _plain_error(exc: Any) -> Response:
        status = HTTPStatus(exc.code)
        return _json({"message": status.phrase}, status)

    for code in (HTTPStatus.NOT_FOUND, HTTPStatus.METHOD_NOT_ALLOWED):
        app.register_error_handler(int(code), _plain_error)


def _register_healthcheck_route(app: Flask) -> None:
    @app.get("/healthcheck/")
    def healthcheck() -> Response:
        return _text("OK", HTTPStatus.OK)


def _register_employee_routes(app: Flask, service: EmployeeService) -> None:
    @app.post("/api/employee/")
    def create_employee() -> Response:
        employee_request = _bind_employee_request()
        try:
            validate(employee_request)
        except ValidationError as exc:
            logger.info("Invalid employee: %s", exc)
            return _text("", HTTPStatus.BAD_REQUEST)
        try:
            employee = service.create_employee(employee_request)
        except Exception as exc:
            logger.exception("Unable to create the employee")
            return _text(str(exc), HTTPStatus.INTERNAL_SERVER_ERROR)
        return _json(employee.to_dict(), HTTPStatus.CREATED)

    @app.get("/api/employee/")
    def get_employees() -> Response:
        try:
            employees = service.get_employees()
        except Exception as exc:
            return _text(str(exc), HTTPStatus.INTERNAL_SERVER_ERROR)
        return _json([employee.to_dict() for employee in employees], HTTPStatus.OK)

    @app.get("/api/employee/<employee_id>")
    def get_employee_by_id(employee_id: str) -> Response:
        try:
            employee = service.get_employee_by_id(employee_id)
        except Exception as exc:
            return _text(str(exc), HTTPStatus.NOT_FOUND)
        return _json(employee.to_dict(), HTTPStatus.OK)

    @app.put("/api/employee/<employee_id>")
    def update_employee(employee_id: str) -> Response:
        employee_request = _bind_employee_request()
        logger.info("employee: %s", employee_request.to_json())
        try:
            validate(employee_request)
        except ValidationError as exc:
            logger.info("Invalid employee: %s", exc)
            return _text(str(exc), HTTPStatus.NOT_FOUND)
        try:
            employee = service.update_employee(employee_id, employee_request)
        except Exception as exc:
            return _text(str(exc), HTTPStatus.NOT_FOUND)
        return _json(employee.to_dict(), HTTPStatus.OK)

    @app.delete("/api/employee/<employee_id>")
    def delete_employee(employee_id: str) -> Response:
        try:
            service.delete_employee_by_id(employee_id)
        except Exception as exc:
            return _text(str(exc), HTTPStatus.NOT_FOUND)
        return _text("", HTTPStatus.OK)


def _register_oauth_routes(
    app: Flask,
    oauth_service: Any,
    client_service: ClientService,
    user_service: UserService,
) -> None:
    @app.post("/oauth/token")
    def token() -> Response:
        auth = get_basic_auth(request.headers)
        if auth is None:
            return _text("Unable to find the Authentication", HTTPStatus.UNAUTHORIZED)
        try:
            client_id, client_secret = decode_basic_auth(auth)
            client_service.is_valid_client_credentials(client_id, client_secret)
            user_id = user_service.get_user_id(
                request.values.get("username", ""), request.values.get("password", "")
            )
            response = oauth_service.handle_token_generation(client_id, client_secret, user_id)
        except (InvalidCredentialsError, TokenError, ValueError) as exc:
            return _text(str(exc), HTTPStatus.UNAUTHORIZED)
        return _json(response.to_dict(), HTTPStatus.OK)

    @app.get("/oauth/userinfo")
    def user_info() -> Response:
        access_token = get_bearer_auth(request.headers)
        if access_token is None:
            return _text("Unable to find the Authentication", HTTPStatus.UNAUTHORIZED)
        try:
            claims = oauth_service.get_token_claims(access_token)
        except TokenError as exc:
            return _text(str(exc), HTTPStatus.UNAUTHORIZED)
        return _json(claims, HTTPStatus.OK)


def create_app(
    employee_service: EmployeeService,
    oauth_service: Any = None,
    auth_enabled: bool | None = None,
) -> Flask:
    """Build the web application around the given services.

    When auth_enabled is None it is read from OAUTH_ENABLED.
    """
    if oauth_service is None:
        oauth_service = OAuthService()
    if auth_enabled is None:
        auth_enabled = _parse_bool(get_env("OAUTH_ENABLED", "false"))

    app = Flask(__name__)
    _enable_cors(app)
    _enable_auth(app, AuthConfig(auth_enabled, DEFAULT_SKIPPED_PATHS, oauth_service))
    _enable_gzip(app)
    _register_error_handlers(app)
    _register_healthcheck_route(app)
    _register_employee_routes(app, employee_service)
    _register_oauth_routes(app, oauth_service, ClientService(), UserService())
    return app


def server_address() -> str:
    """Return the host:port the server listens on, from SERVER_HOST and SERVER_PORT."""
    port = get_env("SERVER_PORT", "8080")
    host = get_env("SERVER_HOST", "0.0.0.0")
    return f"{host}:{port}"