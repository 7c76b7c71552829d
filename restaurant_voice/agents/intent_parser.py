"""Recovery of intent records from free-form model output.

Parsing runs in two stages: the whole response is tried as JSON first, then
the first balanced ``{...}`` block found in the text. Anything that does not
yield a well-formed record becomes the fallback intent.
"""

import json
import logging
from typing import Any

from restaurant_voice.models import Intent, IntentResult

logger = logging.getLogger(__name__)


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        # Invalid or too deeply nested to decode
        return None
    return value if isinstance(value, dict) else None


def _balanced_block_end(text: str, start: int) -> int | None:
    """Return the index after the brace closing the one at ``start``."""
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1

    return None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Find the first balanced JSON object embedded in ``text``.

    Handles objects wrapped in prose or Markdown code fences. Braces inside
    JSON strings do not count towards the balance.

    Args:
        text: Raw model output

    Returns:
        The decoded object, or None if no balanced block decodes to one
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_block_end(text, start)
        if end is not None:
            parsed = _load_object(text[start:end])
            if parsed is not None:
                return parsed
        start = text.find("{", start + 1)
    return None


REQUIRED_KEYS = ("intent", "slots", "confidence")


def _confidence(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not 0.0 <= number <= 1.0:  # also rejects NaN
        return None
    return number


def to_intent_result(payload: dict[str, Any]) -> IntentResult:
    """Normalize a decoded object into an IntentResult.

    ``intent``, ``slots`` and ``confidence`` must all be present. Unknown
    intents, non-object slots and a confidence that is not a number in
    [0, 1] yield the fallback result.
    """
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        logger.warning(f"Model output is missing keys: {missing}")
        return IntentResult.fallback()

    raw_intent = payload["intent"]
    if not isinstance(raw_intent, str):
        logger.warning(f"Model output has no usable intent: {raw_intent!r}")
        return IntentResult.fallback()

    try:
        intent = Intent(raw_intent.strip().lower())
    except ValueError:
        logger.warning(f"Model returned unknown intent {raw_intent!r}")
        return IntentResult.fallback()

    slots = payload["slots"]
    if not isinstance(slots, dict):
        logger.warning(f"Model returned non-object slots: {slots!r}")
        return IntentResult.fallback()

    confidence = _confidence(payload["confidence"])
    if confidence is None:
        logger.warning(f"Model returned invalid confidence: {payload['confidence']!r}")
        return IntentResult.fallback()

    return IntentResult(intent=intent, slots=slots, confidence=confidence)


def parse_intent_payload(raw: str | None) -> IntentResult:
    """Turn raw model output into an IntentResult without raising.

    Args:
        raw: Text returned by the understanding service

    Returns:
        The parsed IntentResult, or the fallback result
    """
    if not raw or not raw.strip():
        logger.warning("Understanding service returned an empty response")
        return IntentResult.fallback()

    payload = _load_object(raw)
    if payload is None:
        payload = extract_json_object(raw)

    if payload is None:
        logger.warning(f"No JSON object in model output: {raw[:200]!r}")
        return IntentResult.fallback()

    return to_intent_result(payload)
