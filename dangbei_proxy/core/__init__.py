"""Core module initialization."""

from .cards import format_card
from .channel import ChunkChannel
from .chunks import ChunkKind, TranslatedChunk
from .conversation import create_conversation
from .exceptions import (
    AuthError,
    ConversationCreationError,
    ProxyError,
    UnsupportedModelError,
    UpstreamHTTPError,
    UpstreamNetworkError,
    UpstreamParseError,
)
from .identity import Identity, IdentityManager, generate_device_id
from .models import SUPPORTED_MODELS, ModelRoute, normalize_request_model, resolve_model
from .prompt import build_full_prompt
from .signer import SignedEnvelope, build_envelope, nanoid, sign
from .sse import SSELineDecoder, parse_data_line
from .translator import AnswerReducer, StreamTranslator, ThinkingState
from .upstream import UpstreamSettings, upstream_headers

__all__ = [
    "AnswerReducer",
    "AuthError",
    "ChunkChannel",
    "ChunkKind",
    "ConversationCreationError",
    "Identity",
    "IdentityManager",
    "ModelRoute",
    "ProxyError",
    "SSELineDecoder",
    "SUPPORTED_MODELS",
    "SignedEnvelope",
    "StreamTranslator",
    "ThinkingState",
    "TranslatedChunk",
    "UnsupportedModelError",
    "UpstreamHTTPError",
    "UpstreamNetworkError",
    "UpstreamParseError",
    "UpstreamSettings",
    "build_envelope",
    "build_full_prompt",
    "create_conversation",
    "format_card",
    "generate_device_id",
    "nanoid",
    "normalize_request_model",
    "parse_data_line",
    "resolve_model",
    "sign",
    "upstream_headers",
]
