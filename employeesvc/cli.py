"""Command that configures and starts the employee service."""

from __future__ import annotations

import argparse
import logging
import os
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from flask import Flask

from .repositories import SqlEmployeeRepository
from .services import EmployeeService
from .utils import get_env
from .web import _parse_bool, create_app, server_address

logger = logging.getLogger(__name__)

_ENV_FILE = ".env"


def _strip_value(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    comment = value.find(" #")
    return value[:comment].rstrip() if comment >= 0 else value


def _load_env_file(path: str = _ENV_FILE) -> None:
    """Load KEY=VALUE lines into the environment without overriding existing values."""
    env_path = Path(path)
    if not env_path.is_file():
        logger.info("Unable to find the env file for load app environment values")
        return
    for number, line in enumerate(env_path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export "):].lstrip()
        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Error loading .env file: malformed line {number}")
        os.environ.setdefault(key, _strip_value(value))
    logger.info("app environment values loaded successfully")


def _open_database(path: str | None = None) -> sqlite3.Connection:
    return sqlite3.connect(path or get_env("DB_PATH", "employees.db"), check_same_thread=False)


def configure_app(connection: Any = None) -> Flask:
    """Load the environment and build the application over a database connection."""
    _load_env_file()
    if connection is None:
        connection = _open_database()
    repository = SqlEmployeeRepository(connection, True)
    return create_app(EmployeeService(repository))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="employeesvc", description="Run the employee CRUD HTTP service."
    )
    parser.add_argument("--database", help="path of the SQLite database file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    _load_env_file()

    with closing(_open_database(args.database)) as connection:
        app = configure_app(connection)
        address = server_address()
        host, _, port = address.rpartition(":")
        ssl_context = None
        if _parse_bool(get_env("SERVER_SSL_ENABLED", "false")):
            ssl_context = (
                get_env("SERVER_SSL_CERT_FILE_PATH", "resources/ssl/cert.pem"),
                get_env("SERVER_SSL_KEY_FILE_PATH", "resources/ssl/key.pem"),
            )
        logger.info("Starting server on: %s", address)
        app.run(host=host, port=int(port), ssl_context=ssl_context)
    return 0