"""dangbei-proxy - OpenAI-compatible proxy for the Dangbei AI search API.

Accepts OpenAI chat-completion requests, forwards them to the upstream
conversational search service with signed requests, and translates the
upstream event stream back into OpenAI-style SSE chunks or a single
aggregated completion.

Example:
    >>> from dangbei_proxy.main import app
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from .config_loader import load_config
from .core import IdentityManager, StreamTranslator, TranslatedChunk, UpstreamSettings
from .logging import logger, setup_logging

__all__ = [
    "IdentityManager",
    "StreamTranslator",
    "TranslatedChunk",
    "UpstreamSettings",
    "load_config",
    "logger",
    "setup_logging",
]
