"""
FormBridge - Record List Codec
===============================

What:  Decodes and encodes the JSON array file that serves as the database.
How:   Anything that is not a JSON array decodes to an empty list: an absent
       file, bytes that are not UTF-8, invalid JSON, or a JSON object/scalar.
       Encoding is UTF-8, two-space indented, non-ASCII kept literal.

Non-finite floats (the NaN stored for an unparsable estimatedValue) are
written as null. A bare NaN token is not JSON and would make the whole file
unreadable to browsers and most JSON tooling.
"""

import json
import logging
import math
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


def load_records(content: Optional[bytes], path: str = "<records>") -> List[Any]:
    """Parse record-list file content; never raises."""
    if content is None:
        return []
    try:
        records = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning("%s is not valid JSON (%s); starting from an empty list", path, str(e))
        return []
    if not isinstance(records, list):
        logger.warning(
            "%s holds a JSON %s, not an array; starting from an empty list",
            path,
            type(records).__name__,
        )
        return []
    return records


def dump_records(records: List[Any]) -> bytes:
    return json.dumps(
        _json_safe(records),
        indent=2,
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value
