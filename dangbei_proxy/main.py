"""Main FastAPI application for the Dangbei proxy."""

import logging
import socket
from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import chat_completions, list_models
from .auth import ApiKeyValidator, require_api_key
from .config_loader import get_server_settings, load_config
from .core.identity import MAX_CONVERSATION_COUNT, IdentityManager
from .core.models import SUPPORTED_MODELS
from .core.translator import StreamTranslator
from .core.upstream import UpstreamSettings
from .logging import setup_logging

logger = logging.getLogger("dangbei-proxy")


def build_translator(config: Mapping[str, Any]) -> StreamTranslator:
    """Build the translator and its identity manager from configuration."""
    session_cfg = config.get("session") or {}
    identity = IdentityManager(
        int(session_cfg.get("max_conversation_count", MAX_CONVERSATION_COUNT))
    )
    return StreamTranslator(UpstreamSettings.from_config(config), identity)


def create_app(
    config: Optional[Mapping[str, Any]] = None,
    translator: Optional[StreamTranslator] = None,
) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        config: Parsed configuration. Loaded from disk when omitted.
        translator: Pre-built translator, e.g. one wired to a fake upstream.

    Returns:
        The configured FastAPI application instance.
    """
    if config is None:
        config = load_config()

    host, port = get_server_settings(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Log the serving setup on startup."""
        logger.info("Dangbei proxy starting up...")
        logger.info("Configured bind address %s:%s", host, port)
        if host == "0.0.0.0":
            hostname = socket.gethostname()
            logger.info("Reachable on local network at http://%s:%s", hostname, port)
        logger.info("Upstream: %s", app.state.translator.settings.api_domain)
        logger.info("Available models: %s", list(SUPPORTED_MODELS))
        if not app.state.api_key_validator.is_enabled():
            logger.warning("No API keys configured; authentication is disabled")
        yield
        logger.info("Dangbei proxy shutting down")

    app = FastAPI(title="Dangbei Proxy", lifespan=lifespan)
    app.state.config = config
    app.state.translator = translator or build_translator(config)
    app.state.api_key_validator = ApiKeyValidator.from_config(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    auth = [Depends(require_api_key)]
    app.get("/v1/models", dependencies=auth)(list_models)
    app.post("/v1/chat/completions", dependencies=auth)(chat_completions)

    logger.info("FastAPI application created")
    return app


setup_logging()
app = create_app()

__all__ = ["app", "build_translator", "create_app"]
