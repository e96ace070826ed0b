"""Folding an OpenAI message list into a single upstream question."""

from typing import Any, Mapping, Optional, Sequence

from ..types import ChatMessage

SYSTEM_PROMPT_HEADER = "[System Prompt]"
CHAT_HISTORY_HEADER = "[Chat History]"
QUESTION_HEADER = "[Question]"


def _message_text(content: Any) -> str:
    # Multi-part content arrives as [{"type": "text", "text": ...}, ...]
    if isinstance(content, list):
        return "".join(
            str(part.get("text", ""))
            for part in content
            if isinstance(part, Mapping) and part.get("type") == "text"
        )
    if content is None:
        return ""
    return str(content)


def build_full_prompt(messages: Optional[Sequence[ChatMessage]]) -> str:
    """Build the ``[System Prompt]`` / ``[Chat History]`` / ``[Question]`` prompt.

    The system section holds the first system message; the history section
    holds every user/assistant turn except the last one and only appears
    when there are at least two turns; the question is the latest user
    message. Sections are separated by a blank line.
    """
    if not messages:
        return ""

    system_prompt = ""
    history: list[str] = []
    last_user_message = ""

    for msg in messages:
        if not isinstance(msg, Mapping):
            continue
        role = msg.get("role")
        text = _message_text(msg.get("content"))
        if role == "system" and not system_prompt:
            system_prompt = text
        elif role == "user":
            history.append(f"user: {text}")
            last_user_message = text
        elif role == "assistant":
            history.append(f"assistant: {text}")

    parts = []
    if system_prompt:
        parts.append(f"{SYSTEM_PROMPT_HEADER}\n{system_prompt}")
    if len(history) > 1:
        parts.append(f"{CHAT_HISTORY_HEADER}\n" + "\n".join(history[:-1]))
    parts.append(f"{QUESTION_HEADER}\n{last_user_message}")

    return "\n\n".join(parts)
