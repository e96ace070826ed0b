"""Output units produced by the stream translator."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import ProxyError


class ChunkKind(str, Enum):
    CONTENT = "content"
    ERROR = "error"
    META = "meta"


@dataclass(frozen=True)
class TranslatedChunk:
    """One content delta, error terminal, or metadata delta."""

    kind: ChunkKind
    content: str = ""
    error: Optional[ProxyError] = None
    device_id: Optional[str] = None
    conversation_id: Optional[str] = None

    @classmethod
    def text(cls, content: str) -> "TranslatedChunk":
        return cls(ChunkKind.CONTENT, content=content)

    @classmethod
    def failure(cls, error: ProxyError) -> "TranslatedChunk":
        return cls(ChunkKind.ERROR, error=error)

    @classmethod
    def metadata(cls, device_id: str, conversation_id: str) -> "TranslatedChunk":
        return cls(
            ChunkKind.META, device_id=device_id, conversation_id=conversation_id
        )

    @property
    def is_error(self) -> bool:
        return self.kind is ChunkKind.ERROR

    @property
    def meta(self) -> Optional[dict[str, Optional[str]]]:
        if self.kind is not ChunkKind.META:
            return None
        return {"device_id": self.device_id, "conversation_id": self.conversation_id}

    def delta(self) -> dict:
        """The OpenAI ``delta`` object for content and metadata chunks."""
        if self.kind is ChunkKind.META:
            return {"meta": self.meta}
        return {"content": self.content}
