"""OpenAI-compatible chat completions endpoint."""

import json
import logging
import time
from typing import AsyncIterator, Mapping

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from ...core.channel import ChunkChannel
from ...core.chunks import TranslatedChunk
from ...core.exceptions import ProxyError
from ...core.models import normalize_request_model
from ...core.translator import StreamTranslator
from ...types import ChatCompletionRequest
from ..openai_format import (
    DONE_FRAME,
    aggregate_completion,
    chunk_payload,
    encode_sse,
    error_payload,
    new_completion_id,
)

logger = logging.getLogger("dangbei-proxy")


def _invalid_request(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "error": {
                "message": message,
                "type": "invalid_request_error",
                "code": code,
            }
        },
    )


async def _read_payload(request: Request) -> ChatCompletionRequest:
    body = await request.body()
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        logger.error(f"Invalid JSON payload: {exc}")
        raise _invalid_request("Invalid JSON payload", "invalid_json") from exc

    if not isinstance(payload, Mapping):
        logger.error("Payload must be a JSON object")
        raise _invalid_request("Request body must be a JSON object", "invalid_json_shape")
    return payload


async def _sse_stream(
    translator: StreamTranslator, payload: ChatCompletionRequest, model: str
) -> AsyncIterator[bytes]:
    completion_id = new_completion_id()
    created = int(time.time())
    async for chunk in ChunkChannel(translator.translate(payload)):
        yield encode_sse(chunk_payload(chunk, completion_id, model, created))
    yield DONE_FRAME


async def _collect(
    translator: StreamTranslator, payload: ChatCompletionRequest
) -> list[TranslatedChunk]:
    chunks = []
    async for chunk in translator.translate(payload):
        chunks.append(chunk)
    return chunks


async def chat_completions(request: Request) -> Response:
    """Chat completions endpoint - OpenAI compatible.

    POST /v1/chat/completions

    Streams ``data:`` frames ending with ``data: [DONE]`` when ``stream`` is
    true, otherwise answers with one aggregated ``chat.completion`` object.
    """
    payload = await _read_payload(request)
    translator: StreamTranslator = request.app.state.translator
    model = normalize_request_model(payload.get("model"))
    is_stream = bool(payload.get("stream"))
    logger.info(f"Processing request for model {model}, stream={is_stream}")

    if is_stream:
        return StreamingResponse(
            _sse_stream(translator, payload, model),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    chunks = await _collect(translator, payload)
    try:
        completion = aggregate_completion(chunks, model)
    except ProxyError as exc:
        logger.error(f"Request for model {model} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_payload(exc))

    logger.info(f"Request for model {model} completed successfully")
    return JSONResponse(content=completion)
