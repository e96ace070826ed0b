"""Markdown rendering of search cards embedded in the upstream stream.

A card arrives as a JSON string shaped like::

    {"cardInfo": {"cardItems": [
        {"type": "2001", "content": "[\\"keyword\\", ...]"},
        {"type": "2002", "content": "[{\\"idIndex\\": 1, \\"name\\": ..., ...}]"}
    ]}}

Item contents are themselves JSON strings. Either item may be missing.
"""

import json
import re
from typing import Any, Mapping, Optional, Sequence, Union

SEARCH_KEYWORDS_TYPE = "2001"
SEARCH_RESULTS_TYPE = "2002"
CARD_RULE = "\n\n---\n\n"

_MARKER_PATTERN = re.compile(
    r"\[(?:Question|System Prompt|Chat History)\]\n|(?:user|assistant):"
)


def _decode(value: Any) -> Any:
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def _find_item(items: Sequence[Any], item_type: str) -> Optional[Mapping[str, Any]]:
    for item in items:
        if isinstance(item, Mapping) and str(item.get("type")) == item_type:
            return item
    return None


def clean_keywords(keywords: Sequence[Any]) -> list[str]:
    """Remove the first prompt marker from each keyword and drop blank ones.

    Surrounding whitespace of a kept keyword is left as is.
    """
    cleaned = []
    for word in keywords:
        word = _MARKER_PATTERN.sub("", str(word), count=1)
        if word.strip():
            cleaned.append(word)
    return cleaned


def format_card(card_content: Union[str, bytes, Mapping[str, Any]]) -> str:
    """Render a card as Markdown.

    Raises:
        ValueError: if the card (or one of its items) is not valid JSON.
        KeyError, TypeError: if the card lacks ``cardInfo.cardItems`` or an
            item has the wrong shape.
    """
    card = _decode(card_content)
    items = card["cardInfo"]["cardItems"]
    if not isinstance(items, list):
        raise TypeError("cardItems must be a list")

    output = CARD_RULE

    keywords_item = _find_item(items, SEARCH_KEYWORDS_TYPE)
    if keywords_item is not None:
        keywords = _decode(keywords_item.get("content") or "[]")
        if not isinstance(keywords, list):
            raise TypeError("search keywords must be a list")
        keywords = clean_keywords(keywords)
        if keywords:
            output += f"Search keywords: {'; '.join(keywords)}。"

    results_item = _find_item(items, SEARCH_RESULTS_TYPE)
    if results_item is not None:
        results = _decode(results_item.get("content") or "[]")
        if not isinstance(results, list):
            raise TypeError("search results must be a list")
        output += f"Found {len(results)} results:\n"
        for result in results:
            if not isinstance(result, Mapping):
                raise TypeError(f"search result must be an object, got {type(result).__name__}")
            output += (
                f"[{result.get('idIndex')}] [{result.get('name')}]({result.get('url')})"
                f"  Source: {result.get('siteName')}\n"
            )

    return output
