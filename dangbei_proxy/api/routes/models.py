"""Models listing endpoint - OpenAI compatible."""

import logging
import time

from ...core.models import SUPPORTED_MODELS
from ...types import ModelCard

logger = logging.getLogger("dangbei-proxy")


async def list_models() -> dict:
    """List available models in OpenAI API format.

    GET /v1/models
    """
    logger.info("Received models list request")

    created = int(time.time())
    models: list[ModelCard] = [
        {
            "id": model_name,
            "object": "model",
            "created": created,
            "owned_by": "deepseek",
        }
        for model_name in SUPPORTED_MODELS
    ]

    return {
        "object": "list",
        "data": models
    }
