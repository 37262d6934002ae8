"""
translators.py — Coerce foreign key documents into Multikey shape.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping

from .constants import MULTIKEY_CONTEXT_V1_URL, MULTIKEY_TYPE
from .errors import InvalidParameterError
from .serialize import to_public_key_multibase_from_jwk, to_secret_key_multibase_from_jwk


def to_multikey(key_pair: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert an arbitrarily typed key document to a Multikey document.

    Multibase members are re-derived from ``publicKeyJwk`` / ``secretKeyJwk``
    (or ``privateKeyJwk``) when present; existing multibase members are kept
    otherwise.

    Args:
        key_pair: Source document, e.g. ``{"type": "JsonWebKey2020", ...}``.

    Returns:
        Dict[str, Any]: A document with ``type`` "Multikey" and the Multikey
        ``@context``. It is not validated; import fails later if it carries
        no key material.
    """
    if not isinstance(key_pair, Mapping):
        raise InvalidParameterError('"keyPair" must be an object.')

    multikey: Dict[str, Any] = {
        "@context": MULTIKEY_CONTEXT_V1_URL,
        "type": MULTIKEY_TYPE,
    }
    if key_pair.get("id"):
        multikey["id"] = key_pair["id"]
    if key_pair.get("controller"):
        multikey["controller"] = key_pair["controller"]

    if key_pair.get("publicKeyJwk"):
        multikey["publicKeyMultibase"] = to_public_key_multibase_from_jwk(key_pair["publicKeyJwk"])
        multikey["publicKeyJwk"] = key_pair["publicKeyJwk"]
    elif key_pair.get("publicKeyMultibase"):
        multikey["publicKeyMultibase"] = key_pair["publicKeyMultibase"]

    secret_jwk = key_pair.get("secretKeyJwk") or key_pair.get("privateKeyJwk")
    if secret_jwk:
        multikey["secretKeyMultibase"] = to_secret_key_multibase_from_jwk(secret_jwk)
        multikey["secretKeyJwk"] = secret_jwk
    elif key_pair.get("secretKeyMultibase"):
        multikey["secretKeyMultibase"] = key_pair["secretKeyMultibase"]

    return multikey
