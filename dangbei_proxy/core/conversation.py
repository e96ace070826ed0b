"""Opening upstream conversations."""

import json
import logging

import httpx

from .exceptions import ConversationCreationError
from .signer import build_envelope
from .upstream import (
    CREATE_CONVERSATION_PATH,
    UpstreamSettings,
    format_httpx_error,
    upstream_headers,
)

logger = logging.getLogger("dangbei-proxy")


async def create_conversation(
    client: httpx.AsyncClient, settings: UpstreamSettings, device_id: str
) -> str:
    """Ask the upstream for a fresh conversation id.

    Every failure mode (transport error, non-200, bad JSON, ``success``
    false, missing id) raises ConversationCreationError. There is no retry.
    """
    envelope = build_envelope({"botCode": settings.bot_code})
    url = settings.build_url(CREATE_CONVERSATION_PATH)

    try:
        resp = await client.post(
            url,
            headers=upstream_headers(settings, device_id, envelope),
            content=envelope.body,
        )
    except httpx.HTTPError as exc:
        logger.error("Error creating conversation: %s", format_httpx_error(exc))
        raise ConversationCreationError() from exc

    if resp.status_code != 200:
        logger.error(
            "Conversation create returned status %s: %s",
            resp.status_code,
            resp.text[:200],
        )
        raise ConversationCreationError()

    try:
        data = resp.json()
    except json.JSONDecodeError as exc:
        logger.error("Conversation create returned invalid JSON: %s", exc)
        raise ConversationCreationError() from exc

    if not isinstance(data, dict) or not data.get("success"):
        logger.error("Conversation create was rejected: %s", str(data)[:200])
        raise ConversationCreationError()

    body = data.get("data")
    conversation_id = body.get("conversationId") if isinstance(body, dict) else None
    if not conversation_id:
        logger.error("Conversation create response carried no conversationId")
        raise ConversationCreationError()

    logger.debug("Opened conversation %s", conversation_id)
    return str(conversation_id)
