"""Core exceptions for the proxy."""

from typing import Optional


class ProxyError(Exception):
    """Base exception for proxy errors."""

    error_type = "proxy_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedModelError(ProxyError):
    """Raised when a requested model is not in the whitelist."""

    error_type = "invalid_request_error"
    status_code = 400

    def __init__(self, model: str) -> None:
        super().__init__(f"Unsupported model: {model}")
        self.model = model


class ConversationCreationError(ProxyError):
    """Raised when the upstream refuses to open a conversation."""

    error_type = "upstream_error"
    status_code = 502

    def __init__(self, message: str = "Failed to create conversation") -> None:
        super().__init__(message)


class UpstreamHTTPError(ProxyError):
    """Raised when the chat endpoint answers with a non-2xx status."""

    error_type = "upstream_error"
    status_code = 502

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"HTTP {status}: {body}")
        self.status = status
        self.body = body


class UpstreamParseError(ProxyError):
    """Raised when a ``data:`` line in the upstream stream is not valid JSON."""

    error_type = "upstream_parse_error"
    status_code = 502


class UpstreamNetworkError(ProxyError):
    """Raised for transport-level failures while talking to the upstream."""

    error_type = "upstream_network_error"
    status_code = 502

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class AuthError(ProxyError):
    """Raised when the client credential is missing or wrong."""

    error_type = "authentication_error"
    status_code = 401

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code or "invalid_api_key"
