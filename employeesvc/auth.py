"""JWT access tokens, the authentication check and basic-auth decoding."""

from __future__ import annotations

import base64
import binascii
import time
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import jwt

from .utils import get_bearer_auth, get_env

TOKEN_LIFETIME_SECONDS = 120
DEFAULT_SKIPPED_PATHS = ("/healthcheck/", "/oauth/token", "/swagger/")

_HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]
_STRING_CLAIMS = ("aud", "sub", "jti", "iss")


class TokenError(Exception):
    """Raised when an access token is missing, malformed, expired or badly signed."""


@dataclass(frozen=True)
class JWTResponse:
    """Body returned by the token endpoint."""

    access_token: str
    refresh_token: str
    expires_in: int = TOKEN_LIFETIME_SECONDS
    scope: str = "all"
    token_type: str = "Bearer"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _refresh_token(access_token: str) -> str:
    derived = uuid.uuid5(uuid.uuid4(), access_token)
    encoded = base64.urlsafe_b64encode(str(derived).encode()).decode()
    return encoded.upper().rstrip("=")


class OAuthService:
    """Issues and checks HMAC-signed JWT access tokens."""

    def __init__(self, signing_key: str | None = None):
        self.signing_key = (
            signing_key if signing_key is not None else get_env("OAUTH_SIGNING_KEY", "00000000")
        )

    @property
    def _key(self) -> bytes:
        return self.signing_key.encode()

    def handle_token_generation(self, client_id: str, client_secret: str, user_id: str) -> JWTResponse:
        """Issue an access token for user_id on behalf of client_id, with a refresh token."""
        claims: dict[str, Any] = {"aud": client_id, "sub": user_id}
        claims = {name: value for name, value in claims.items() if value}
        claims["exp"] = int(time.time()) + TOKEN_LIFETIME_SECONDS
        access = jwt.encode(claims, self._key, algorithm="HS512")
        return JWTResponse(access_token=access, refresh_token=_refresh_token(access))

    def parse_token(self, access_token: str) -> dict[str, Any]:
        """Verify the token and return its claims."""
        try:
            claims = jwt.decode(
                access_token,
                self._key,
                algorithms=_HMAC_ALGORITHMS,
                options={"verify_aud": False, "require": ["exp"]},
            )
        except jwt.PyJWTError as exc:
            raise TokenError(str(exc)) from exc
        for name in _STRING_CLAIMS:
            if name in claims and not isinstance(claims[name], str):
                raise TokenError(f"claim {name!r} must be a string")
        return claims

    def get_token_claims(self, access_token: str) -> dict[str, str]:
        claims = self.parse_token(access_token)
        return {
            "subject": claims.get("sub", ""),
            "audience": claims.get("aud", ""),
            "id": claims.get("jti", ""),
            "issuer": claims.get("iss", ""),
        }

    def is_valid_token(self, access_token: str | None) -> bool:
        if not access_token:
            return False
        try:
            self.parse_token(access_token)
        except TokenError:
            return False
        return True

    def is_authenticated(self, headers: Mapping[str, Any]) -> bool:
        """Whether the request headers carry a valid bearer token."""
        return self.is_valid_token(get_bearer_auth(headers))


@dataclass
class OAuthServiceStub:
    """Stand-in that accepts every token, issues fixed ones and reports fixed claims."""

    claims: dict[str, str] = field(default_factory=dict)
    accepts_tokens: bool = True

    def handle_token_generation(self, client_id: str, client_secret: str, user_id: str) -> JWTResponse:
        return JWTResponse(access_token="token", refresh_token="token")

    def parse_token(self, access_token: str) -> dict[str, Any]:
        """Return a copy of the configured claims, whatever the token."""
        if not self.accepts_tokens:
            raise TokenError("invalid token")
        return dict(self.claims)

    def get_token_claims(self, access_token: str) -> dict[str, str]:
        return {name: str(value) for name, value in self.parse_token(access_token).items()}

    def is_valid_token(self, access_token: str | None) -> bool:
        return self.accepts_tokens

    def is_authenticated(self, headers: Mapping[str, Any]) -> bool:
        return self.is_valid_token(get_bearer_auth(headers))


@dataclass
class AuthConfig:
    """Which paths need a bearer token, and the service that checks it."""

    enable_auth: bool = False
    skipped_paths: Sequence[str] = DEFAULT_SKIPPED_PATHS
    oauth_service: Any = field(default_factory=OAuthService)

    def is_skipped_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.skipped_paths)

    def authenticate(self, path: str, headers: Mapping[str, Any]) -> dict[str, Any] | None:
        """Return the token claims for a protected path, None when no check applies."""
        if not self.enable_auth or self.is_skipped_path(path):
            return None
        access_token = get_bearer_auth(headers)
        if access_token is None:
            raise TokenError("invalid token")
        return self.oauth_service.parse_token(access_token)


def decode_basic_auth(auth: str) -> tuple[str, str]:
    """Split a base64 'client:secret' credential into its two parts."""
    try:
        decoded = base64.b64decode(auth, validate=True).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        decoded = ""
    parts = decoded.split(":")
    if len(parts) < 2:
        raise ValueError("malformed basic credentials")
    return parts[0], parts[1]