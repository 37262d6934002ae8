"""
helpers.py — Small RSA/JWK utilities shared by the engine and serializer.

Covers base64url handling of JWK members and modulus-length derivation.
"""

from __future__ import annotations
import base64
import binascii
import math
import re
from typing import Any, Dict, Mapping, Optional

from .constants import DEFAULT_MODULUS_LENGTH, PUBLIC_JWK_FIELDS
from .errors import InvalidKeyMaterialError, InvalidParameterError

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


# ---------------------------------------------------------------------------
# base64url (RFC 7515 §2, no padding)
# ---------------------------------------------------------------------------

def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    """Strictly decode unpadded base64url; raises binascii.Error outside the alphabet."""
    if not _B64URL_RE.fullmatch(text):
        raise binascii.Error("Non-base64url character in input.")
    padding = "=" * (-len(text) % 4)
    return base64.b64decode(text.translate(str.maketrans("-_", "+/")) + padding, validate=True)


def b64url_uint(value: int) -> str:
    """Encode a non-negative integer as minimal big-endian base64url."""
    length = max(1, (value.bit_length() + 7) // 8)
    return b64url_encode(value.to_bytes(length, "big"))


def uint_from_b64url(text: Any, member: str) -> int:
    """Decode a JWK integer member, raising InvalidKeyMaterialError on garbage."""
    if not isinstance(text, str) or not text:
        raise InvalidKeyMaterialError(f'JWK member "{member}" must be a non-empty base64url string.')
    try:
        return int.from_bytes(b64url_decode(text), "big")
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyMaterialError(f'JWK member "{member}" is not valid base64url.') from exc


# ---------------------------------------------------------------------------
# Modulus length
# ---------------------------------------------------------------------------

def is_modulus_number(value: Any) -> bool:
    """True for a finite int or float that is not a bool."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def secret_key_size(modulus_length: int) -> int:
    """Size of an RSA secret key in bytes: the modulus length in bits / 8."""
    if not is_modulus_number(modulus_length):
        raise InvalidParameterError('"modulusLength" must be a number.')
    return int(modulus_length // 8)


def modulus_length_from_jwk(jwk: Mapping[str, Any]) -> int:
    """
    Derive the modulus length in bits from a JWK's ``n`` member.

    Computed as 8 * byte length of the decoded modulus. An encoder that strips
    a leading zero byte makes this under-report by 8 bits; keys produced by
    this package never carry such a byte for the supported sizes.
    """
    if not isinstance(jwk, Mapping) or not jwk.get("n"):
        raise InvalidParameterError('"jwk" must have an "n" property.')
    try:
        n_bytes = b64url_decode(jwk["n"])
    except (binascii.Error, ValueError, TypeError) as exc:
        raise InvalidKeyMaterialError('JWK member "n" is not valid base64url.') from exc
    return len(n_bytes) * 8


def resolve_modulus_length(
    public_key: Any = None,
    declared: Any = None,
    jwk: Optional[Mapping[str, Any]] = None,
) -> int:
    """
    Resolve a key pair's modulus length.

    Priority: the handle's own reported length, then a declared
    ``modulusLength``, then the length derived from the public JWK, then
    DEFAULT_MODULUS_LENGTH.
    """
    reported = getattr(public_key, "modulus_length", None)
    if reported:
        return reported
    if isinstance(declared, int) and not isinstance(declared, bool) and declared > 0:
        return declared
    if jwk:
        return modulus_length_from_jwk(jwk)
    return DEFAULT_MODULUS_LENGTH


# ---------------------------------------------------------------------------
# JWK shaping
# ---------------------------------------------------------------------------

def public_jwk(jwk: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy only the public members (plus ``alg`` when present) of a JWK."""
    result = {field: jwk.get(field) for field in PUBLIC_JWK_FIELDS}
    if jwk.get("alg"):
        result["alg"] = jwk["alg"]
    return result

