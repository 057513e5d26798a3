from __future__ import annotations

import json
from typing import Any

_DECODER = json.JSONDecoder()


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Return the first JSON object embedded in free text, or None.

    Providers often wrap JSON in prose or code fences, so every ``{`` is tried as
    a start position until one decodes to a mapping.
    """
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        try:
            parsed, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    return None
