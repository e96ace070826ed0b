"""Translation of the upstream answer stream into OpenAI-style deltas.

The upstream sends one JSON object per ``data:`` line::

    data:{"type":"answer","content_type":"thinking","content":"Let me"}
    data:{"type":"answer","content_type":"text","content":"Hello"}
    data:{"type":"answer","content_type":"card","content":"{\\"cardInfo\\":...}"}

Thinking content is wrapped in ``<think>`` framing, text passes straight
through and cards are rendered to Markdown and appended once the stream
has closed, followed by a metadata chunk carrying the ids used.
"""

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from .cards import format_card
from .chunks import TranslatedChunk
from .conversation import create_conversation
from .exceptions import (
    ProxyError,
    UnsupportedModelError,
    UpstreamHTTPError,
    UpstreamNetworkError,
    UpstreamParseError,
)
from .identity import IdentityManager
from .models import normalize_request_model, resolve_model
from .prompt import build_full_prompt
from .signer import build_envelope
from .sse import SSELineDecoder, parse_data_line
from .upstream import CHAT_PATH, UpstreamSettings, format_httpx_error, upstream_headers
from ..types import ChatCompletionRequest

logger = logging.getLogger("dangbei-proxy")

THINK_OPEN_FRAMES = ("<think>\n\n",)
THINK_CLOSE_FRAMES = ("\n", "</think>", "\n\n")
EMITTED_CONTENT_TYPES = {"text", "thinking"}


class ThinkingState(Enum):
    NOT_STARTED = -1
    OPEN = 0
    CLOSED = 1


# The only moves the state machine knows; anything else stays put.
_THINKING_TRANSITIONS = {
    (ThinkingState.NOT_STARTED, "thinking"): (ThinkingState.OPEN, THINK_OPEN_FRAMES),
    (ThinkingState.OPEN, "text"): (ThinkingState.CLOSED, THINK_CLOSE_FRAMES),
}


class AnswerReducer:
    """Reduces upstream events of one stream into translated chunks."""

    def __init__(self) -> None:
        self.thinking = ThinkingState.NOT_STARTED
        self.cards: list[str] = []

    def feed_line(self, line: str) -> list[TranslatedChunk]:
        """Reduce one raw line; non-``data:`` lines produce nothing.

        Raises:
            UpstreamParseError: if the line payload (or a card in it) is malformed.
        """
        try:
            event = parse_data_line(line)
        except json.JSONDecodeError as exc:
            raise UpstreamParseError(f"JSONDecodeError: {exc}") from exc
        if event is None:
            return []
        return self.reduce(event)

    def reduce(self, event: Any) -> list[TranslatedChunk]:
        if not isinstance(event, Mapping) or event.get("type") != "answer":
            return []

        content = event.get("content")
        content_type = event.get("content_type")
        chunks = [TranslatedChunk.text(frame) for frame in self._advance(content_type)]

        if content_type == "card":
            try:
                self.cards.append(format_card(content))
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                raise UpstreamParseError(f"JSONDecodeError: {exc}") from exc

        if content and content_type in EMITTED_CONTENT_TYPES:
            chunks.append(TranslatedChunk.text(str(content)))
        return chunks

    def _advance(self, content_type: Optional[str]) -> tuple[str, ...]:
        move = _THINKING_TRANSITIONS.get((self.thinking, content_type))
        if move is None:
            return ()
        self.thinking, frames = move
        return frames

    def finish(self, device_id: str, conversation_id: str) -> list[TranslatedChunk]:
        chunks = []
        if self.cards:
            chunks.append(TranslatedChunk.text("".join(self.cards)))
        chunks.append(TranslatedChunk.metadata(device_id, conversation_id))
        return chunks


class StreamTranslator:
    """Runs one chat request against the upstream and yields translated chunks.

    Each call to :meth:`translate` opens its own upstream connection and is
    meant to be consumed once. Failures are never raised across the stream
    boundary: they arrive as a single error chunk, after which the stream
    ends.
    """

    def __init__(
        self,
        settings: Optional[UpstreamSettings] = None,
        identity: Optional[IdentityManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or UpstreamSettings()
        self.identity = identity or IdentityManager()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.timeout(),
            transport=self.transport,
            follow_redirects=True,
        )

    def build_chat_payload(
        self, body: ChatCompletionRequest, model: str, conversation_id: str
    ) -> dict[str, Any]:
        route = resolve_model(model)
        return {
            "stream": True,
            "botCode": self.settings.bot_code,
            "userAction": route.user_action,
            "model": route.transport_model,
            "conversationId": conversation_id,
            "question": build_full_prompt(body.get("messages")),
        }

    async def translate(self, body: ChatCompletionRequest) -> AsyncIterator[TranslatedChunk]:
        model = normalize_request_model(body.get("model"))
        try:
            resolve_model(model)
        except UnsupportedModelError as exc:
            logger.warning("Rejected request: %s", exc.message)
            yield TranslatedChunk.failure(exc)
            return

        ids = self.identity.get_or_create_ids()
        device_id = ids.device_id

        async with self._client() as client:
            try:
                conversation_id = await create_conversation(
                    client, self.settings, device_id
                )
            except ProxyError as exc:
                yield TranslatedChunk.failure(exc)
                return
            self.identity.bind_conversation(device_id, conversation_id)

            payload = self.build_chat_payload(body, model, conversation_id)
            envelope = build_envelope(payload)
            url = self.settings.build_url(CHAT_PATH)
            reducer = AnswerReducer()
            logger.info(
                "Streaming %s (transport=%s, action=%r) in conversation %s",
                model,
                payload["model"],
                payload["userAction"],
                conversation_id,
            )

            try:
                async with client.stream(
                    "POST",
                    url,
                    headers=upstream_headers(self.settings, device_id, envelope),
                    content=envelope.body,
                ) as resp:
                    if not resp.is_success:
                        text = (await resp.aread()).decode("utf-8", errors="replace")
                        raise UpstreamHTTPError(resp.status_code, text)

                    decoder = SSELineDecoder()
                    async for raw in resp.aiter_bytes():
                        for line in decoder.feed(raw):
                            for chunk in reducer.feed_line(line):
                                yield chunk

                    leftover = decoder.flush()
                    if leftover.strip():
                        logger.debug("Discarding unterminated line: %r", leftover[:200])
            except (UpstreamHTTPError, UpstreamParseError) as exc:
                logger.error("Upstream stream failed: %s", exc.message[:500])
                yield TranslatedChunk.failure(exc)
                return
            except httpx.HTTPError as exc:
                description = format_httpx_error(exc)
                logger.error("Error in upstream stream: %s", description)
                yield TranslatedChunk.failure(
                    UpstreamNetworkError(
                        description,
                        retryable=isinstance(exc, httpx.TimeoutException),
                    )
                )
                return

        for chunk in reducer.finish(device_id, conversation_id):
            yield chunk
