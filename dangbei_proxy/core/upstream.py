"""Upstream service settings and request helpers."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from .signer import SignedEnvelope

logger = logging.getLogger("dangbei-proxy")

DEFAULT_API_DOMAIN = "https://ai-api.dangbei.net"
DEFAULT_ORIGIN = "https://ai.dangbei.com"
DEFAULT_REFERER = "https://ai.dangbei.com/"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)
DEFAULT_BOT_CODE = "AI_SEARCH"
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 120.0

CREATE_CONVERSATION_PATH = "/ai-search/conversationApi/v1/create"
CHAT_PATH = "/ai-search/chatApi/v1/chat"


@dataclass(frozen=True)
class UpstreamSettings:
    """Where and how to reach the upstream search API."""

    api_domain: str = DEFAULT_API_DOMAIN
    origin: str = DEFAULT_ORIGIN
    referer: str = DEFAULT_REFERER
    user_agent: str = DEFAULT_USER_AGENT
    bot_code: str = DEFAULT_BOT_CODE
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT

    def build_url(self, path: str) -> str:
        return f"{self.api_domain.rstrip('/')}{path}"

    def timeout(self) -> httpx.Timeout:
        """Connect/write/pool bounded by connect_timeout; read is the idle-read limit."""
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.connect_timeout,
            pool=self.connect_timeout,
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "UpstreamSettings":
        section = config.get("upstream") or {}
        read_timeout = section.get("read_timeout", DEFAULT_READ_TIMEOUT)
        return cls(
            api_domain=str(section.get("api_domain") or DEFAULT_API_DOMAIN),
            origin=str(section.get("origin") or DEFAULT_ORIGIN),
            referer=str(section.get("referer") or DEFAULT_REFERER),
            user_agent=str(section.get("user_agent") or DEFAULT_USER_AGENT),
            bot_code=str(section.get("bot_code") or DEFAULT_BOT_CODE),
            connect_timeout=_parse_timeout(
                section.get("connect_timeout"), DEFAULT_CONNECT_TIMEOUT
            ),
            read_timeout=(
                None if read_timeout is None
                else _parse_timeout(read_timeout, DEFAULT_READ_TIMEOUT)
            ),
        )


def _parse_timeout(value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid timeout value %r, using %ss", value, default)
        return default
    return parsed if parsed > 0 else default


def upstream_headers(
    settings: UpstreamSettings, device_id: str, envelope: SignedEnvelope
) -> dict[str, str]:
    """Headers every signed upstream call must carry."""
    return {
        "Origin": settings.origin,
        "Referer": settings.referer,
        "User-Agent": settings.user_agent,
        "deviceId": device_id,
        "nonce": envelope.nonce,
        "sign": envelope.signature,
        "timestamp": envelope.timestamp,
        "Content-Type": "application/json",
    }


def format_httpx_error(exc: httpx.HTTPError) -> str:
    """Produce a user-facing description of an httpx error."""
    message = str(exc).strip()
    name = exc.__class__.__name__
    return f"{name}: {message}" if message else name
