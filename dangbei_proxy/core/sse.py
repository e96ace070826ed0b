"""SSE (Server-Sent Events) line decoding for the upstream stream."""

import codecs
import json
from typing import Any, Optional

DATA_PREFIX = "data:"


class SSELineDecoder:
    """Turns arbitrarily chunked bytes into complete text lines.

    A multi-byte UTF-8 sequence split across two reads is held back by the
    incremental decoder, and the text after the last newline is carried
    over to the next ``feed`` call.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return lines

    def flush(self) -> str:
        """Return whatever unterminated text is left and reset."""
        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return remainder


def parse_data_line(line: str) -> Optional[Any]:
    """Decode the JSON payload of a ``data:`` line.

    Returns None for lines that are not data lines.

    Raises:
        json.JSONDecodeError: if the payload is not valid JSON.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    return json.loads(line[len(DATA_PREFIX):])
