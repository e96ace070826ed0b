"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Iterable, Optional

import httpx

from dangbei_proxy.core.identity import IdentityManager
from dangbei_proxy.core.translator import StreamTranslator
from dangbei_proxy.core.upstream import UpstreamSettings

UPSTREAM_BASE = "http://upstream.local"
API_KEY = "sk-test-key"


# =============================================================================
# Fake upstream
# =============================================================================


def answer_line(content_type: str, content: Any) -> str:
    """Build one upstream ``data:`` line for an answer event."""
    event = {"type": "answer", "content_type": content_type, "content": content}
    return "data:" + json.dumps(event, ensure_ascii=False) + "\n"


def build_card(keywords: Optional[list[str]] = None, results: Optional[list[dict]] = None) -> str:
    """Build a card payload the way the upstream nests it (JSON inside JSON)."""
    items = []
    if keywords is not None:
        items.append({"type": "2001", "content": json.dumps(keywords, ensure_ascii=False)})
    if results is not None:
        items.append({"type": "2002", "content": json.dumps(results, ensure_ascii=False)})
    return json.dumps({"cardInfo": {"cardItems": items}}, ensure_ascii=False)


class FakeUpstream:
    """Deterministic stand-in for the upstream API behind an httpx.MockTransport.

    Attributes:
        create_status: Status code of the conversation-create endpoint.
        create_body: JSON body returned by the conversation-create endpoint.
        chat_status: Status code of the chat endpoint.
        chat_chunks: Byte chunks the chat endpoint streams, boundaries kept.
        chat_error: Exception raised after all chat chunks were sent.
        requests: Every request received, in order.
    """

    def __init__(
        self,
        chat_chunks: Iterable[bytes | str] = (),
        *,
        create_status: int = 200,
        create_body: Any = None,
        chat_status: int = 200,
        chat_error: Optional[Exception] = None,
        conversation_id: str = "conv-123",
    ) -> None:
        self.create_status = create_status
        self.create_body = (
            create_body
            if create_body is not None
            else {"success": True, "data": {"conversationId": conversation_id}}
        )
        self.chat_status = chat_status
        self.chat_chunks = [c.encode("utf-8") if isinstance(c, str) else c for c in chat_chunks]
        self.chat_error = chat_error
        self.requests: list[httpx.Request] = []

    @property
    def create_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/conversationApi/v1/create")]

    @property
    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/chatApi/v1/chat")]

    def chat_payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.chat_requests]

    async def _stream(self) -> AsyncIterator[bytes]:
        for chunk in self.chat_chunks:
            yield chunk
        if self.chat_error is not None:
            raise self.chat_error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/conversationApi/v1/create"):
            if isinstance(self.create_body, (bytes, str)):
                return httpx.Response(self.create_status, content=self.create_body)
            return httpx.Response(self.create_status, json=self.create_body)
        if request.url.path.endswith("/chatApi/v1/chat"):
            if self.chat_status != 200:
                return httpx.Response(self.chat_status, text="upstream exploded")
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=self._stream(),
            )
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_translator(
    upstream: FakeUpstream, identity: Optional[IdentityManager] = None
) -> StreamTranslator:
    settings = UpstreamSettings(api_domain=UPSTREAM_BASE, read_timeout=5.0)
    return StreamTranslator(settings, identity or IdentityManager(), upstream.transport())


async def collect(translator: StreamTranslator, body: dict[str, Any]) -> list:
    return [chunk async for chunk in translator.translate(body)]


def contents(chunks: list) -> list[str]:
    return [c.content for c in chunks if c.kind.value == "content"]


def build_test_config(api_keys: Optional[list[str]] = None) -> dict[str, Any]:
    """Build a config dict for create_app()."""
    return {
        "proxy_settings": {
            "server": {"host": "127.0.0.1", "port": 9999},
            "auth": {"api_keys": [API_KEY] if api_keys is None else api_keys},
        },
        "upstream": {"api_domain": UPSTREAM_BASE},
    }
