"""Bearer-token authentication for the proxy."""

from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from fastapi import HTTPException, Request

from ..core.exceptions import AuthError

logger = logging.getLogger("dangbei-proxy")

# Same placeholder syntax config_loader substitutes
_PLACEHOLDER_PATTERN = re.compile(r"\$\{[^}]+\}|\$[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class AuthContext:
    """Result of authenticating one request."""

    authenticated: bool
    key_hint: str | None = None


class ApiKeyValidator:
    """Checks the ``Authorization: Bearer`` header against configured keys.

    With no keys configured every request is let through.
    """

    def __init__(self, api_keys: Iterable[str] = ()) -> None:
        self._keys = [str(key) for key in api_keys if key]

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ApiKeyValidator":
        proxy_settings = config.get("proxy_settings") or {}
        auth_cfg = proxy_settings.get("auth") or {}
        keys = auth_cfg.get("api_keys") or []
        if isinstance(keys, str):
            keys = [keys]

        usable = []
        for key in keys:
            if _PLACEHOLDER_PATTERN.search(str(key)):
                logger.warning(
                    "Ignoring API key %r: environment variable was not substituted", key
                )
                continue
            usable.append(key)
        return cls(usable)

    def is_enabled(self) -> bool:
        return bool(self._keys)

    def authenticate(self, authorization: str | None) -> AuthContext:
        """Validate a raw Authorization header value.

        Raises:
            AuthError: if the key is missing or does not match.
        """
        if not self._keys:
            return AuthContext(authenticated=False)

        if not authorization:
            raise AuthError("Missing API key", code="missing_api_key")

        provided = authorization.strip()
        if provided.lower().startswith("bearer "):
            provided = provided[7:].strip()

        # Constant-time comparison against every key
        for key in self._keys:
            if hmac.compare_digest(provided.encode("utf-8"), key.encode("utf-8")):
                return AuthContext(authenticated=True, key_hint=key[:6])

        raise AuthError("Invalid API key", code="invalid_api_key")

    def validate_request(self, request: Request) -> AuthContext:
        """Validate an incoming request and return auth context.

        Raises:
            HTTPException: 401 for invalid/missing key.
        """
        try:
            return self.authenticate(request.headers.get("Authorization"))
        except AuthError as exc:
            logger.warning("Request rejected: %s", exc.message.lower())
            raise HTTPException(
                status_code=exc.status_code,
                detail={
                    "error": {
                        "message": exc.message,
                        "type": exc.error_type,
                        "code": exc.code,
                    }
                },
            ) from exc


async def require_api_key(request: Request) -> AuthContext:
    """FastAPI dependency guarding the API routes."""
    validator: ApiKeyValidator = request.app.state.api_key_validator
    return validator.validate_request(request)
