"""Environment and HTTP header helpers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any


def get_env(key: str, fallback: str) -> str:
    """Return the environment value for key, or fallback when unset or empty."""
    return os.environ.get(key) or fallback


def _header_value(headers: Mapping[str, Any], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        value = next((v for k, v in headers.items() if k.lower() == lowered), None)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value


def get_auth_header(headers: Mapping[str, Any], prefix: str) -> str | None:
    """Return the Authorization value after prefix, or None when absent or empty."""
    auth = _header_value(headers, "Authorization")
    if not auth or not auth.startswith(prefix):
        return None
    return auth[len(prefix):] or None


def get_bearer_auth(headers: Mapping[str, Any]) -> str | None:
    return get_auth_header(headers, "Bearer ")


def get_basic_auth(headers: Mapping[str, Any]) -> str | None:
    return get_auth_header(headers, "Basic ")