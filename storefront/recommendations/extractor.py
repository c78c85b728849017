"""
Recommendation extraction from free-form assistant replies.

The model is asked to append a JSON block to its prose, but the format is
not guaranteed, so the payload is located with three strategies tried in
order:

1. a fenced block tagged ``json``;
2. an untagged fenced block whose content mentions ``recommendedProducts``;
3. a bare object found by counting ``{``/``}`` from the first ``{``,
   accepted only when the reply mentions ``recommendedProducts``.

The brace counter does not understand string literals: a title or reason
containing a literal brace can end the object early (the document then
fails to decode and the turn has no recommendation) or, outside fences,
pull surrounding prose into the match.

Not finding a payload is a normal outcome and yields ``None``. A located
payload that fails to decode also yields ``None``; recommendations are
never built from a broken document.
"""

import json
import logging
from typing import NamedTuple, Optional

from storefront.entities import (
    DEFAULT_REASON,
    UNKNOWN_PRODUCT,
    ProductRecommendation,
    RecommendedProduct,
)
from storefront.errors import MalformedPayload

logger = logging.getLogger(__name__)

RECOMMENDATION_MARKER = "recommendedProducts"
TAGGED_FENCE = "```json"
UNTAGGED_FENCE = "```\n"
CLOSING_FENCE = "```"

# Key names observed for the product title, most specific first
TITLE_KEYS = ("productTitle", "product_title", "title", "name", "productName")
DEFAULT_PRIORITY = 1


class Match(NamedTuple):
    start: int
    end: int
    content: str


# ---------------------------------------------------------------------------
# Locating
# ---------------------------------------------------------------------------

def find_fenced_block(text, opening) -> Optional[Match]:
    start = text.find(opening)
    if start == -1:
        return None
    content_start = start + len(opening)
    close = text.find(CLOSING_FENCE, content_start)
    if close == -1:
        return None
    return Match(start, close + len(CLOSING_FENCE), text[content_start:close])


def find_balanced_object(text) -> Optional[Match]:
    """First ``{`` through the position where brace depth returns to zero."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return Match(start, index + 1, text[start:index + 1])

    # Unbalanced: runs to the end of the reply
    return Match(start, len(text), text[start:])


def locate_payload(text) -> Optional[str]:
    tagged = find_fenced_block(text, TAGGED_FENCE)
    if tagged:
        return tagged.content

    untagged = find_fenced_block(text, UNTAGGED_FENCE)
    if untagged and RECOMMENDATION_MARKER in untagged.content:
        return untagged.content

    if RECOMMENDATION_MARKER in text:
        bare = find_balanced_object(text)
        if bare:
            return bare.content

    return None


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _as_string(value):
    return value if isinstance(value, str) else None


def _as_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def first_decoded(item, keys, decode, default):
    """Try each key in order and return the first value that decodes."""
    for key in keys:
        if key not in item:
            continue
        value = decode(item[key])
        if value is not None:
            return value
    return default


def decode_recommended_product(item) -> RecommendedProduct:
    if not isinstance(item, dict):
        raise MalformedPayload("Recommended product entry is not an object")
    return RecommendedProduct(
        product_title=first_decoded(item, TITLE_KEYS, _as_string, UNKNOWN_PRODUCT),
        priority=first_decoded(item, ("priority",), _as_int, DEFAULT_PRIORITY),
        reason=first_decoded(item, ("reason",), _as_string, DEFAULT_REASON),
    )


def decode_recommendation(json_text) -> ProductRecommendation:
    try:
        document = json.loads(json_text)
    except ValueError as e:
        raise MalformedPayload(f"Payload is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedPayload("Payload is not a JSON object")

    items = document.get(RECOMMENDATION_MARKER)
    if not isinstance(items, list):
        raise MalformedPayload(f"Payload has no {RECOMMENDATION_MARKER} list")

    return ProductRecommendation(
        recommended_products=tuple(decode_recommended_product(item) for item in items),
        reasoning=_as_string(document.get("reasoning")),
        customer_goal=_as_string(document.get("customerGoal")),
    )


def extract_recommendation(text) -> Optional[ProductRecommendation]:
    payload = locate_payload(text or "")
    if payload is None:
        logger.debug("[Advisor] No JSON found in response")
        return None

    try:
        recommendation = decode_recommendation(payload.strip())
    except MalformedPayload as e:
        logger.warning("[Advisor] Failed to parse recommendation: %s", e.message)
        logger.debug("[Advisor] JSON string was: %s", payload)
        return None

    logger.info("[Advisor] Parsed %d recommended products", len(recommendation.recommended_products))
    return recommendation


# ---------------------------------------------------------------------------
# Display cleanup
# ---------------------------------------------------------------------------

def _remove(text, match):
    return text[:match.start] + text[match.end:]


def clean_message_for_display(text):
    """Remove the recommendation payload (and its fences) from the reply."""
    cleaned = text
    removed = False

    tagged = find_fenced_block(cleaned, TAGGED_FENCE)
    if tagged:
        cleaned = _remove(cleaned, tagged)
        removed = True

    untagged = find_fenced_block(cleaned, UNTAGGED_FENCE)
    if untagged and (RECOMMENDATION_MARKER in untagged.content or "{" in untagged.content):
        cleaned = _remove(cleaned, untagged)
        removed = True

    if RECOMMENDATION_MARKER in cleaned:
        bare = find_balanced_object(cleaned)
        if bare and RECOMMENDATION_MARKER in bare.content:
            cleaned = _remove(cleaned, bare)
            removed = True

    if not removed:
        return text
    return cleaned.strip()
