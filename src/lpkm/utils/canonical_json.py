"""
Canonical JSON serialization for structured command output.
Identical objects always produce identical JSON strings.
"""

import json
from typing import Any

from ..config import JSON_SEPARATORS, JSON_SORT_KEYS, JSON_ENSURE_ASCII


def canonicalize(obj: Any) -> str:
    """
    Serialize an object to canonical JSON.

    Canonical properties:
    - Keys are sorted
    - No whitespace
    - Consistent encoding

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string

    Raises:
        TypeError: If object is not JSON-serializable
    """
    try:
        return json.dumps(
            obj,
            separators=JSON_SEPARATORS,
            sort_keys=JSON_SORT_KEYS,
            ensure_ascii=JSON_ENSURE_ASCII,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise TypeError(f"Object not JSON-serializable: {e}")
