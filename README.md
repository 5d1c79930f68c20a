# employeesvc

A small HTTP service that keeps a table of employees in a SQLite database
and exposes it through a JSON API. Access can optionally be guarded by
HMAC-signed JWT bearer tokens issued from an OAuth-style token endpoint.

## Running the server

```
employeesvc
employeesvc --database /path/to/employees.db
```

`--database` names the SQLite file to use; without it the path comes from
`DB_PATH`, and failing that `employees.db` in the working directory. The
`employees` table is created if it does not exist.

If a `.env` file is present in the working directory, its `KEY=VALUE`
lines are loaded into the environment first. Variables that are already
set are not overridden; blank lines and `#` comments are ignored, an
`export ` prefix is accepted, and a line without `=` is an error.

### Configuration

| Variable                    | Meaning                                            | Default                  |
|-----------------------------|----------------------------------------------------|--------------------------|
| `DB_PATH`                   | SQLite database file                               | `employees.db`           |
| `SERVER_HOST`               | address to bind                                    | `0.0.0.0`                |
| `SERVER_PORT`               | port to bind                                       | `8080`                   |
| `SERVER_SSL_ENABLED`        | serve HTTPS                                        | `false`                  |
| `SERVER_SSL_CERT_FILE_PATH` | certificate file when HTTPS is on                  | `resources/ssl/cert.pem` |
| `SERVER_SSL_KEY_FILE_PATH`  | key file when HTTPS is on                          | `resources/ssl/key.pem`  |
| `OAUTH_ENABLED`             | require a bearer token on protected routes         | `false`                  |
| `OAUTH_CLIENT_ID`           | client id accepted by the token endpoint           | built in                 |
| `OAUTH_CLIENT_SECRET`       | client secret accepted by the token endpoint       | built in                 |
| `OAUTH_USER_ID`             | user id placed in issued tokens                    | built in                 |
| `OAUTH_USER_NAME`           | user name accepted by the token endpoint           | built in                 |
| `OAUTH_USER_PASSWORD`       | user password accepted by the token endpoint       | built in                 |
| `OAUTH_SIGNING_KEY`         | HMAC key used to sign and verify tokens            | built in                 |

Boolean settings are true only for `1`, `t`, `T`, `true`, `True` or
`TRUE`; any other value counts as false. The built-in credentials and key
are meant for local development only; set your own before exposing the
service.

## HTTP API

| Method   | Path                 | Result                                             |
|----------|----------------------|----------------------------------------------------|
| `GET`    | `/healthcheck/`      | `200` with the text `OK`                           |
| `POST`   | `/api/employee/`     | `201` with the created employee, `400` if invalid  |
| `GET`    | `/api/employee/`     | `200` with a list of employees                     |
| `GET`    | `/api/employee/<id>` | `200` with the employee, `404` if none             |
| `PUT`    | `/api/employee/<id>` | `200` with the updated employee, `404` otherwise   |
| `DELETE` | `/api/employee/<id>` | `200`, or `404` if nothing was deleted             |
| `POST`   | `/oauth/token`       | token response for valid credentials, else `401`   |
| `GET`    | `/oauth/userinfo`    | claims of the bearer token, else `401`             |

An employee request body looks like this:

```json
{
  "firstName": "Marcos",
  "lastName": "Luna",
  "secondLastName": "Valdez",
  "dateOfBirth": "1994-04-25T12:00:00Z",
  "dateOfEmployment": "1994-04-25T12:00:00Z",
  "status": "ACTIVE"
}
```

All name fields and both dates are required, and `status` must be
`ACTIVE` or `INACTIVE`. An invalid body is answered with `400` on `POST`
and with `404` and the validation message on `PUT`. A body that is not
JSON gives `400`, and a body sent with a non-JSON content type gives
`415`. Created employees receive a fresh UUID as their `id`.

### Tokens

`POST /oauth/token` expects an `Authorization: Basic ...` header holding
the base64 of `client:secret`, and `username` and `password` form or
query values. On success it returns:

```json
{"access_token": "...", "refresh_token": "...", "expires_in": 120, "scope": "all", "token_type": "Bearer"}
```

The access token is an HS512 JWT valid for 120 seconds, with the client
id as audience and the user id as subject. `GET /oauth/userinfo` with
`Authorization: Bearer token` returns its `subject`, `audience`, `id` and
`issuer`.

When `OAUTH_ENABLED` is true, every path that does not start with
`/healthcheck/`, `/oauth/token` or `/swagger/` needs a bearer token: a
missing one is answered with `400`, an invalid or expired one with `401`.

Responses carry permissive CORS headers (`OPTIONS` preflight requests are
answered with `204`), and are gzip-compressed when the client accepts it.

## Using it from Python

The application can be built around any repository:

```python
from employeesvc.auth import OAuthServiceStub
from employeesvc.repositories import EmployeeRepositoryStub
from employeesvc.services import EmployeeService
from employeesvc.web import create_app

service = EmployeeService(EmployeeRepositoryStub())
app = create_app(service, OAuthServiceStub(), False)

with app.test_client() as client:
    response = client.get("/api/employee/")
    print(response.status_code, response.get_json())
```

- `employeesvc.models`: `Employee`, `EmployeeRequest`, `GetEmployeeRequest`
  and `EmployeeStatus`, with `to_dict`, `to_json` and `from_dict`.
- `employeesvc.validation`: `validate(obj)` raises `ValidationError`;
  `parse_body(body, model)` decodes JSON leniently.
- `employeesvc.repositories`: `SqlEmployeeRepository(connection, init_db)`
  works on a DB-API connection with `?` parameters (such as `sqlite3`);
  `EmployeeRepositoryStub` returns fixed records.
- `employeesvc.services`: `EmployeeService`, `ClientService`, `UserService`.
- `employeesvc.auth`: `OAuthService`, `OAuthServiceStub`, `AuthConfig`,
  `decode_basic_auth`.
- `employeesvc.messaging`: `KafkaProducerService(producer, upsert_topic,
  delete_topic)` sends employee requests as JSON to any object with a
  `produce(topic, value)` method; topics default to
  `KAFKA_PRODUCER_EMPLOYEE_UPSERT_TOPIC` (`employee-upsert.v1`) and
  `KAFKA_PRODUCER_EMPLOYEE_DELETE_TOPIC` (`employee-deletion.v1`).
- `employeesvc.cli`: `configure_app(connection)` wires repository, services
  and routes the same way the `employeesvc` command does.

## What it does not do

- It includes no Kafka client: `KafkaProducerService` needs a producer
  object supplied by the caller, and the HTTP routes do not publish any
  events when employees change.
- It serves no Swagger or other API documentation page; `/swagger/` is
  only exempt from the token check.
- Issued refresh tokens cannot be exchanged for new access tokens, and
  tokens are not stored or revoked.