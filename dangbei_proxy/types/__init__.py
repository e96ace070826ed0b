"""Type definitions for the proxy."""

from .chat import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    Choice,
    ChunkChoice,
    CompletionMessage,
    Delta,
    ErrorBody,
    ErrorChunk,
    Meta,
    ModelCard,
)

__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "Choice",
    "ChunkChoice",
    "CompletionMessage",
    "Delta",
    "ErrorBody",
    "ErrorChunk",
    "Meta",
    "ModelCard",
]
