import base64
import gzip
import re
import sqlite3
from datetime import datetime, timezone

import pytest

from employeesvc.auth import OAuthService, OAuthServiceStub
from employeesvc.models import Employee, EmployeeRequest, EmployeeStatus
from employeesvc.repositories import EmployeeRepositoryStub, SqlEmployeeRepository
from employeesvc.services import EmployeeService
from employeesvc.web import create_app, server_address

UUID_RE = re.compile(
    r"^[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-4[a-fA-F0-9]{3}-[89abAB][a-fA-F0-9]{3}-[a-fA-F0-9]{12}$"
)
BORN = datetime(1994, 4, 25, 8, tzinfo=timezone.utc)


def _request_json() -> str:
    return EmployeeRequest(
        first_name="Marcos",
        last_name="Luna",
        second_last_name="Valdez",
        date_of_birth=BORN,
        date_of_employment=datetime.now(timezone.utc),
        status=EmployeeStatus.ACTIVE,
    ).to_json()


def _stored_employee() -> Employee:
    return Employee(
        id="1",
        first_name="Marcos",
        last_name="Luna",
        second_last_name="Valdez",
        date_of_birth=BORN,
        date_of_employment=datetime(2020, 1, 2, tzinfo=timezone.utc),
        status="ACTIVE",
    )


def _basic(user: str, secret: str) -> str:
    return base64.b64encode(f"{user}:{secret}".encode()).decode()


@pytest.fixture
def stub_client():
    app = create_app(EmployeeService(EmployeeRepositoryStub()), OAuthServiceStub(), False)
    return app.test_client()


@pytest.fixture
def sql_env():
    connection = sqlite3.connect(":memory:")
    repository = SqlEmployeeRepository(connection, True)
    app = create_app(EmployeeService(repository), OAuthServiceStub(), False)
    yield app.test_client(), repository
    connection.close()


def test_healthcheck(stub_client):
    resp = stub_client.get("/healthcheck/")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "OK"


def test_get_employees_from_stub(stub_client):
    resp = stub_client.get("/api/employee/", content_type="application/json")
    assert resp.status_code == 200
    employees = resp.get_json()
    assert [e["id"] for e in employees] == ["1", "2"]


def test_create_employee_with_stub(stub_client):
    resp = stub_client.post("/api/employee/", data=_request_json(), content_type="application/json")
    assert resp.status_code == 201
    assert resp.get_json()["firstName"] == "Marcos"


def test_get_employee_by_id_with_stub(stub_client):
    resp = stub_client.get("/api/employee/1")
    assert resp.status_code == 200
    assert resp.get_json()["id"] == "1"


def test_update_employee_with_stub(stub_client):
    resp = stub_client.put("/api/employee/1", data=_request_json(), content_type="application/json")
    assert resp.status_code == 200
    assert resp.get_json()["id"] == "1"


def test_delete_employee_with_stub(stub_client):
    resp = stub_client.delete("/api/employee/1")
    assert resp.status_code == 200
    assert resp.get_data() == b""


@pytest.mark.parametrize(
    "method, path, with_body, status",
    [
        ("GET", "/api/employee/", False, 200),
        ("POST", "/api/employee/", True, 201),
        ("GET", "/api/employee/1", False, 200),
        ("PUT", "/api/employee/1", True, 200),
        ("DELETE", "/api/employee/1", False, 200),
    ],
)
def test_route_table(stub_client, method, path, with_body, status):
    body = _request_json() if with_body else None
    resp = stub_client.open(path, method=method, data=body, content_type="application/json")
    assert resp.status_code == status


def test_find_by_id_from_database(sql_env):
    client, repository = sql_env
    repository.create(_stored_employee())
    resp = client.get("/api/employee/1")
    assert resp.status_code == 200
    assert resp.get_json()["lastName"] == "Luna"


def test_find_by_id_missing_is_not_found(sql_env):
    client, _ = sql_env
    resp = client.get("/api/employee/1")
    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "no rows in result set"


def test_find_all_from_database(sql_env):
    client, repository = sql_env
    repository.create(_stored_employee())
    resp = client.get("/api/employee/")
    assert resp.status_code == 200
    assert len(resp.get_json()) == 1


def test_find_all_empty_database(sql_env):
    client, _ = sql_env
    resp = client.get("/api/employee/")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_create_assigns_uuid(sql_env):
    client, repository = sql_env
    resp = client.post("/api/employee/", data=_request_json(), content_type="application/json")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["firstName"] == "Marcos"
    assert UUID_RE.match(body["id"])
    assert repository.find_by_id(body["id"]).second_last_name == "Valdez"


def test_create_invalid_employee_is_bad_request(sql_env):
    client, _ = sql_env
    invalid = Employee(id="1", date_of_birth=BORN, date_of_employment=datetime.now(timezone.utc))
    resp = client.post("/api/employee/", data=invalid.to_json(), content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_data() == b""


def test_create_malformed_json_is_bad_request(sql_env):
    client, _ = sql_env
    resp = client.post("/api/employee/", data="{not json", content_type="application/json")
    assert resp.status_code == 400
    assert "message" in resp.get_json()


def test_create_with_non_json_body_is_unsupported(sql_env):
    client, _ = sql_env
    resp = client.post("/api/employee/", data="hello", content_type="text/plain")
    assert resp.status_code == 415


def test_update_in_database(sql_env):
    client, repository = sql_env
    repository.create(_stored_employee())
    resp = client.put("/api/employee/1", data=_request_json(), content_type="application/json")
    assert resp.status_code == 200
    assert resp.get_json()["id"] == "1"


def test_update_missing_is_not_found(sql_env):
    client, _ = sql_env
    resp = client.put("/api/employee/1", data=_request_json(), content_type="application/json")
    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "employee not Found"


def test_update_invalid_body_is_not_found(sql_env):
    client, repository = sql_env
    repository.create(_stored_employee())
    resp = client.put("/api/employee/1", data="{}", content_type="application/json")
    assert resp.status_code == 404
    assert "firstName" in resp.get_data(as_text=True)


def test_delete_in_database(sql_env):
    client, repository = sql_env
    repository.create(_stored_employee())
    resp = client.delete("/api/employee/1")
    assert resp.status_code == 200
    assert repository.find_all() == []


def test_delete_missing_is_not_found(sql_env):
    client, _ = sql_env
    resp = client.delete("/api/employee/1")
    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "employee not Found"


def test_unknown_route_returns_json_message(stub_client):
    resp = stub_client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Not Found"}


def test_cors_preflight(stub_client):
    resp = stub_client.options(
        "/api/employee/",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 204
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "DELETE" in resp.headers["Access-Control-Allow-Methods"]
    assert "Authorization" in resp.headers["Access-Control-Allow-Headers"]


def test_cors_headers_on_simple_request(stub_client):
    resp = stub_client.get("/healthcheck/", headers={"Origin": "http://example.com"})
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.headers["Access-Control-Allow-Credentials"] == "true"


def test_gzip_when_accepted(stub_client):
    resp = stub_client.get("/healthcheck/", headers={"Accept-Encoding": "gzip"})
    assert resp.headers["Content-Encoding"] == "gzip"
    assert gzip.decompress(resp.get_data()) == b"OK"


@pytest.fixture
def secured_client():
    service = OAuthService(signing_key="secret")
    app = create_app(EmployeeService(EmployeeRepositoryStub()), service, True)
    return app.test_client(), service


def test_auth_missing_token_is_bad_request(secured_client):
    client, _ = secured_client
    resp = client.get("/api/employee/")
    assert resp.status_code == 400


def test_auth_invalid_token_is_unauthorized(secured_client):
    client, _ = secured_client
    resp = client.get("/api/employee/", headers={"Authorization": "Bearer token"})
    assert resp.status_code == 401


def test_auth_valid_token_is_accepted(secured_client):
    client, service = secured_client
    issued = service.handle_token_generation("client", "secret", "000000")
    resp = client.get(
        "/api/employee/", headers={"Authorization": f"Bearer {issued.access_token}"}
    )
    assert resp.status_code == 200
    assert len(resp.get_json()) == 2


def test_auth_skips_healthcheck(secured_client):
    client, _ = secured_client
    resp = client.get("/healthcheck/")
    assert resp.status_code == 200


@pytest.fixture
def oauth_client(monkeypatch):
    monkeypatch.setenv("OAUTH_CLIENT_ID", "client")
    monkeypatch.setenv("OAUTH_CLIENT_SECRET", "secret")
    monkeypatch.setenv("OAUTH_USER_ID", "000000")
    monkeypatch.setenv("OAUTH_USER_NAME", "user")
    monkeypatch.setenv("OAUTH_USER_PASSWORD", "password")
    app = create_app(EmployeeService(EmployeeRepositoryStub()), OAuthService(signing_key="secret"), False)
    return app.test_client()


def test_token_and_user_info(oauth_client):
    resp = oauth_client.post(
        "/oauth/token",
        headers={"Authorization": "Basic " + _basic("client", "secret")},
        data={"username": "user", "password": "password"},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] == 120
    info = oauth_client.get(
        "/oauth/userinfo", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert info.status_code == 200
    assert info.get_json()["subject"] == "000000"
    assert info.get_json()["audience"] == "client"


def test_token_without_authentication(oauth_client):
    resp = oauth_client.post("/oauth/token")
    assert resp.status_code == 401
    assert resp.get_data(as_text=True) == "Unable to find the Authentication"


def test_token_with_wrong_client_secret(oauth_client):
    resp = oauth_client.post(
        "/oauth/token",
        headers={"Authorization": "Basic " + _basic("client", "placeholder")},
        data={"username": "user", "password": "password"},
    )
    assert resp.status_code == 401
    assert resp.get_data(as_text=True) == "invalid client secret"


def test_token_with_wrong_user(oauth_client):
    resp = oauth_client.post(
        "/oauth/token",
        headers={"Authorization": "Basic " + _basic("client", "secret")},
        data={"username": "someone", "password": "password"},
    )
    assert resp.status_code == 401
    assert resp.get_data(as_text=True) == "invalid username"


def test_user_info_with_bad_token(oauth_client):
    resp = oauth_client.get("/oauth/userinfo", headers={"Authorization": "Bearer token"})
    assert resp.status_code == 401


def test_server_address_default(monkeypatch):
    monkeypatch.delenv("SERVER_PORT", raising=False)
    monkeypatch.delenv("SERVER_HOST", raising=False)
    assert server_address() == "0.0.0.0:8080"


def test_server_address_from_env(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("SERVER_HOST", "127.0.0.1")
    assert server_address() == "127.0.0.1:9000"