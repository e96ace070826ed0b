"""Serialization of translated chunks into OpenAI-compatible payloads."""

import json
import time
import uuid
from typing import Any, Iterable, Optional

from ..core.chunks import TranslatedChunk
from ..core.exceptions import ProxyError
from ..types import ChatCompletionChunk, ChatCompletionResponse, ErrorChunk, Meta

# Known ambiguity: a literal triple newline inside upstream content moves
# the split point.
REASONING_SEPARATOR = "\n\n\n"
DONE_FRAME = b"data: [DONE]\n\n"


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def error_payload(error: ProxyError) -> ErrorChunk:
    return {
        "error": {
            "message": error.message,
            "type": error.error_type,
            "code": getattr(error, "code", None) or type(error).__name__,
        }
    }


def chunk_payload(
    chunk: TranslatedChunk, completion_id: str, model: str, created: int
) -> ChatCompletionChunk | ErrorChunk:
    if chunk.error is not None:
        return error_payload(chunk.error)
    return {
        "id": completion_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [{"index": 0, "delta": chunk.delta(), "finish_reason": None}],
    }


def encode_sse(payload: Any) -> bytes:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def split_reasoning(content: str) -> tuple[str, str]:
    """Split aggregated output into (reasoning_content, content).

    Everything before the first triple newline is reasoning. Output without
    a triple newline is all reasoning and ``content`` is empty.
    """
    if REASONING_SEPARATOR not in content:
        return content, ""
    reasoning, final = content.split(REASONING_SEPARATOR, 1)
    return reasoning, final


def aggregate_completion(
    chunks: Iterable[TranslatedChunk],
    model: str,
    completion_id: Optional[str] = None,
    created: Optional[int] = None,
) -> ChatCompletionResponse:
    """Fold a finished chunk sequence into one ``chat.completion`` object.

    Raises:
        ProxyError: the error carried by an error chunk, if one was produced.
    """
    parts: list[str] = []
    meta: Optional[Meta] = None
    for chunk in chunks:
        if chunk.error is not None:
            raise chunk.error
        if chunk.meta is not None:
            meta = chunk.meta
        elif chunk.content:
            parts.append(chunk.content)

    reasoning, content = split_reasoning("".join(parts))
    return {
        "id": completion_id or new_completion_id(),
        "object": "chat.completion",
        "created": created if created is not None else int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "reasoning_content": reasoning,
                    "content": content,
                    "meta": meta,
                },
                "finish_reason": "stop",
            }
        ],
    }
