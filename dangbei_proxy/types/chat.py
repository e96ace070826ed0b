"""Types for the OpenAI-compatible surface of the proxy.

These follow the OpenAI Chat Completions format, extended with the
``meta`` object that reports which upstream device and conversation
served a request, and ``reasoning_content`` for aggregated responses.
"""

from typing import Any
from typing_extensions import TypedDict


class ChatMessage(TypedDict, total=False):
    """An inbound chat message.

    Attributes:
        role: "system", "user" or "assistant". Other roles are ignored.
        content: Plain text, or a list of content parts of which only the
            ``text`` parts are used.
    """
    role: str
    content: str | list[dict[str, Any]] | None


class ChatCompletionRequest(TypedDict, total=False):
    """Body of ``POST /v1/chat/completions``."""
    model: str
    messages: list[ChatMessage]
    stream: bool


class Meta(TypedDict):
    """Upstream identity used to serve a request."""
    device_id: str | None
    conversation_id: str | None


class Delta(TypedDict, total=False):
    """Incremental content in a streaming chunk."""
    content: str
    meta: Meta


class ChunkChoice(TypedDict):
    index: int
    delta: Delta
    finish_reason: str | None


class ChatCompletionChunk(TypedDict):
    """One ``data:`` frame of a streaming response."""
    id: str
    object: str
    created: int
    model: str
    choices: list[ChunkChoice]


class ErrorBody(TypedDict):
    message: str
    type: str
    code: str


class ErrorChunk(TypedDict):
    """Terminal frame emitted when translation fails."""
    error: ErrorBody


class CompletionMessage(TypedDict):
    role: str
    reasoning_content: str
    content: str
    meta: Meta | None


class Choice(TypedDict):
    index: int
    message: CompletionMessage
    finish_reason: str


class ChatCompletionResponse(TypedDict):
    """Aggregated (non-streaming) response."""
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]


class ModelCard(TypedDict):
    """An entry of ``GET /v1/models``."""
    id: str
    object: str
    created: int
    owned_by: str
