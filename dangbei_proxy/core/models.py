"""Supported model names and how they map onto upstream parameters."""

from dataclasses import dataclass

from .exceptions import UnsupportedModelError

DEFAULT_MODEL = "deepseek-r1"

SUPPORTED_MODELS = (
    "deepseek-v3",
    "deepseek-v3-search",
    "deepseek-r1",
    "deepseek-r1-search",
    "doubao",
    "doubao-search",
    "qwen",
    "qwen-search",
)


@dataclass(frozen=True)
class ModelRoute:
    """A whitelisted model resolved into what the upstream expects."""

    name: str
    transport_model: str
    user_action: str


def normalize_request_model(model_name: object) -> str:
    """Trim a client-supplied model name, defaulting when absent or empty.

    A present but blank or non-string value is returned as text so that
    :func:`resolve_model` rejects it.
    """
    if model_name is None or model_name == "":
        return DEFAULT_MODEL
    return str(model_name).strip()


def resolve_model(model_name: str) -> ModelRoute:
    """Map a public model name to its transport model and user actions.

    ``deepseek-r1*`` turns on deep reasoning, ``*-search`` turns on online
    search; the transport model is the part before the first hyphen.

    Raises:
        UnsupportedModelError: if the name is not whitelisted.
    """
    if model_name not in SUPPORTED_MODELS:
        raise UnsupportedModelError(model_name)

    actions = []
    if model_name.startswith("deepseek-r1"):
        actions.append("deep")
    if model_name.endswith("-search"):
        actions.append("online")

    return ModelRoute(
        name=model_name,
        transport_model=model_name.split("-", 1)[0],
        user_action=",".join(actions),
    )
