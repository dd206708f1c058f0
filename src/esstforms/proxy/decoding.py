from __future__ import annotations

import json
from typing import Any, Optional

RAW_EXCERPT_LIMIT = 500


def safe_parse_json(text: str) -> Optional[dict[str, Any]]:
    """
    Decode an Apps Script reply that may be wrapped in HTML.

    Tries the whole text first, then the slice between the first `{` and the
    last `}`. Anything that is not a JSON object counts as a failure.

    Returns:
        The decoded object, or None.
    """
    try:
        data = json.loads(text)
    except ValueError:
        first = text.find("{")
        last = text.rfind("}")
        if first == -1 or last <= first:
            return None
        try:
            data = json.loads(text[first : last + 1])
        except ValueError:
            return None
    return data if isinstance(data, dict) else None


def excerpt(text: str) -> str:
    return text[:RAW_EXCERPT_LIMIT]
