"""Compression codec for cached catalog payloads.

Values are serialized to JSON, deflated with zlib and base64-encoded so
they can be stored as Redis strings. Both directions degrade instead of
raising: a corrupt or legacy cache entry must never crash a read path.
"""

import base64
import binascii
import json
import zlib
from typing import Any

import structlog

from src.cache.exceptions import DecodeCorruptionError

logger = structlog.get_logger(__name__)

DEFAULT_COMPRESSION_THRESHOLD = 1024  # bytes


def encode(value: Any) -> str:
    """
    Serialize, deflate and base64-encode a JSON-compatible value.

    Args:
        value: Any JSON-compatible value (dict, list, str, number, bool, None)

    Returns:
        Base64 text of the deflated JSON. If compression fails, the plain
        JSON text is returned instead so downstream readers always get a
        parseable string.

    Example:
        >>> payload = encode({"id": "42", "title": "Bali"})
        >>> decode(payload)
        {'id': '42', 'title': 'Bali'}
    """
    try:
        json_string = json.dumps(value, separators=(",", ":"))
        compressed = zlib.compress(json_string.encode("utf-8"))
        return base64.b64encode(compressed).decode("ascii")

    except Exception as e:
        logger.error(
            "compression_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        # Fall back to uncompressed JSON
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except ValueError:
            # Circular references cannot be serialized at all
            return "{}"


def decode_strict(payload: str) -> Any:
    """
    Decode a payload produced by encode(), raising on corruption.

    Plain JSON objects and arrays (payloads written by the degraded encode
    path, or by older writers) are parsed directly without decompression.

    Args:
        payload: Encoded string read from the cache

    Returns:
        The original value

    Raises:
        DecodeCorruptionError: If any stage (base64, inflate, UTF-8, JSON)
            fails
    """
    try:
        if payload.startswith("{") or payload.startswith("["):
            return json.loads(payload)

        compressed = base64.b64decode(payload, validate=True)
        json_string = zlib.decompress(compressed).decode("utf-8")
        return json.loads(json_string)

    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError, AttributeError) as e:
        raise DecodeCorruptionError(
            f"Cannot decode cached payload: {type(e).__name__}: {e}"
        ) from e


def decode(payload: str) -> Any:
    """
    Decode a payload produced by encode(), never raising.

    On failure a last-resort plain JSON parse is attempted; if that fails
    too an empty dict is returned.

    Args:
        payload: Encoded string read from the cache

    Returns:
        The original value, or ``{}`` for unrecoverable payloads

    Example:
        >>> decode('{"a":1}')
        {'a': 1}
        >>> decode("not-valid-base64!!")
        {}
    """
    try:
        return decode_strict(payload)

    except DecodeCorruptionError as e:
        logger.error("decompression_failed", error=e.message)

        try:
            return json.loads(payload)
        except (TypeError, ValueError):
            return {}


def should_compress(value: Any, threshold: int = DEFAULT_COMPRESSION_THRESHOLD) -> bool:
    """
    Check whether a value is large enough to be worth compressing.

    Args:
        value: JSON-compatible value
        threshold: Size threshold in bytes (default: 1KB)

    Returns:
        True if the serialized JSON is larger than ``threshold`` bytes.
        Values that cannot be serialized return False.
    """
    try:
        json_string = json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError):
        return False

    return len(json_string.encode("utf-8")) > threshold
