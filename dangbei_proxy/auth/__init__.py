"""Authentication module for the proxy."""

from .api_key import ApiKeyValidator, AuthContext, require_api_key

__all__ = ["ApiKeyValidator", "AuthContext", "require_api_key"]
