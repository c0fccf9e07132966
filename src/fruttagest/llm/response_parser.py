"""Recover the JSON object from a model answer."""
from __future__ import annotations
import json
import re

_FENCED_BLOCK = re.compile(r'```(?:json)?\s*\n(.*?)\n\s*```', re.DOTALL)


def _as_object(value) -> dict:
    # A bare list is read as the item list of an order
    if isinstance(value, list):
        return {"items": value}
    if isinstance(value, dict):
        return value
    raise ValueError(f"Expected a JSON object, got {type(value).__name__}")


def extract_json_from_response(text: str) -> dict:
    """Extract a JSON object from LLM response text.

    Attempts, in order: the whole text, a fenced ```json block, then the
    span between the first ``{`` and the last ``}``. Raises ``ValueError``
    if none of them decodes to an object (or to a bare item list).
    """
    text = text.strip().lstrip("\ufeff")
    if not text:
        raise ValueError("Empty response")

    candidates = [text]
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    first_brace = text.find('{')
    last_brace = text.rfind('}')
    if first_brace != -1 and last_brace > first_brace:
        candidates.append(text[first_brace:last_brace + 1])

    for candidate in candidates:
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        return _as_object(decoded)

    raise ValueError(f"Could not extract JSON from response: {text[:200]}...")
