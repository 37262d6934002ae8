"""
multibase.py — base58btc multibase codec

Multibase strings name their encoding with a leading character; key
material in Multikey documents always uses base58btc, marked by 'z'.
"""

from __future__ import annotations
from typing import Any

import base58

from .constants import MULTIBASE_BASE58BTC_PREFIX as MB_PREFIX
from .errors import InvalidEncodingError


def encode_multibase(data: bytes) -> str:
    """Encode bytes as a 'z'-prefixed base58btc string."""
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidEncodingError(f"Expected bytes, got {type(data).__name__}.")
    return MB_PREFIX + base58.b58encode(bytes(data)).decode("ascii")


def decode_multibase(text: Any) -> bytes:
    """Decode a 'z'-prefixed base58btc string back to bytes."""
    if not isinstance(text, str):
        raise InvalidEncodingError(f"Expected a string, got {type(text).__name__}.")
    if not text.startswith(MB_PREFIX):
        raise InvalidEncodingError(f"Unsupported multibase prefix {text[:1]!r}; expected {MB_PREFIX!r}.")
    try:
        return base58.b58decode(text[len(MB_PREFIX):])
    except ValueError as exc:
        raise InvalidEncodingError(str(exc)) from exc
