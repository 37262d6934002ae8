"""
serialize.py — Key pair conversion layer.

Implements:
  - Codec primitives: JWK <-> DER (SPKI / PKCS#8) through the engine,
    DER <-> multibase through the base58btc codec
  - Key pair import: native handles, JWK documents or multibase documents
    normalized into a KeyPair
  - Key pair export: Multikey document or raw DER byte pair

Import dispatch is explicit: ``classify_key_input`` picks one
``KeyInputKind`` in priority order (native handle, publicKeyJwk,
publicKeyMultibase) and each kind maps to exactly one import function.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from . import engine
from .constants import DEFAULT_MODULUS_LENGTH, MULTIKEY_CONTEXT_V1_URL, MULTIKEY_TYPE
from .engine import KeyHandle
from .errors import (
    InvalidParameterError,
    MissingPrivateMaterialError,
    UnrecognizedKeyFormatError,
)
from .helpers import is_modulus_number, public_jwk, resolve_modulus_length
from .keypair import KeyPair
from .multibase import decode_multibase, encode_multibase

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JWK <-> DER
# ---------------------------------------------------------------------------

def jwk_to_public_bytes(jwk: Mapping[str, Any]) -> bytes:
    """Convert a JWK to public key bytes (DER-encoded SPKI)."""
    if not isinstance(jwk, Mapping):
        raise InvalidParameterError('"jwk" must be an object.')
    handle = engine.import_key("jwk", public_jwk(jwk), usages=["verify"])
    return engine.export_key("spki", handle)


def jwk_to_secret_bytes(jwk: Mapping[str, Any]) -> bytes:
    """Convert a JWK to secret key bytes (DER-encoded PKCS#8)."""
    if not isinstance(jwk, Mapping):
        raise InvalidParameterError('"jwk" must be an object.')
    if not jwk.get("d"):
        raise MissingPrivateMaterialError('JWK has no "d" member.')
    handle = engine.import_key("jwk", jwk, usages=["sign"])
    return engine.export_key("pkcs8", handle)


# ---------------------------------------------------------------------------
# DER <-> multibase
# ---------------------------------------------------------------------------

def to_public_key_multibase(public_key_bytes: bytes) -> str:
    if not isinstance(public_key_bytes, (bytes, bytearray)):
        raise InvalidParameterError('"public_key_bytes" must be bytes.')
    return encode_multibase(public_key_bytes)


def to_secret_key_multibase(secret_key_bytes: bytes) -> str:
    if not isinstance(secret_key_bytes, (bytes, bytearray)):
        raise InvalidParameterError('"secret_key_bytes" must be bytes.')
    return encode_multibase(secret_key_bytes)


def from_public_key_multibase(public_key_multibase: str) -> bytes:
    if not isinstance(public_key_multibase, str):
        raise InvalidParameterError('"publicKeyMultibase" must be a string.')
    return decode_multibase(public_key_multibase)


def from_secret_key_multibase(secret_key_multibase: str) -> bytes:
    if not isinstance(secret_key_multibase, str):
        raise InvalidParameterError('"secretKeyMultibase" must be a string.')
    return decode_multibase(secret_key_multibase)


def to_public_key_multibase_from_jwk(jwk: Mapping[str, Any]) -> str:
    return to_public_key_multibase(jwk_to_public_bytes(jwk))


def to_secret_key_multibase_from_jwk(jwk: Mapping[str, Any]) -> str:
    return to_secret_key_multibase(jwk_to_secret_bytes(jwk))


def key_handle_from_raw(
    modulus_length: int,
    public_key: bytes,
    secret_key: Optional[bytes] = None,
) -> KeyHandle:
    """
    Import DER key bytes into a handle.

    Returns the secret handle (PKCS#8) when ``secret_key`` is given, the
    public handle (SPKI) otherwise.
    """
    if not is_modulus_number(modulus_length):
        raise InvalidParameterError('"modulusLength" must be a number.')
    if not isinstance(public_key, (bytes, bytearray)):
        raise InvalidParameterError('"publicKey" must be bytes.')
    if secret_key is not None and not isinstance(secret_key, (bytes, bytearray)):
        raise InvalidParameterError('"secretKey" must be bytes.')

    if secret_key is not None:
        return engine.import_key("pkcs8", secret_key, usages=["sign"], modulus_length=int(modulus_length))
    return engine.import_key("spki", public_key, usages=["verify"], modulus_length=int(modulus_length))


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

class KeyInputKind(Enum):
    NATIVE = "native"
    JWK = "jwk"
    MULTIBASE = "multibase"


def classify_key_input(key_pair: Any) -> KeyInputKind:
    """Decide which import path applies to ``key_pair``."""
    if isinstance(key_pair, KeyPair):
        return KeyInputKind.NATIVE
    if not isinstance(key_pair, Mapping):
        raise InvalidParameterError('"keyPair" must be an object.')
    if isinstance(key_pair.get("publicKey"), KeyHandle):
        return KeyInputKind.NATIVE
    if key_pair.get("publicKeyJwk"):
        return KeyInputKind.JWK
    if key_pair.get("publicKeyMultibase"):
        return KeyInputKind.MULTIBASE
    raise UnrecognizedKeyFormatError(
        f"Keys present: {', '.join(sorted(map(str, key_pair))) or '(none)'}"
    )


def _secret_jwk(doc: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    return doc.get("secretKeyJwk") or doc.get("privateKeyJwk")


def _import_native(key_pair: Any) -> KeyPair:
    if isinstance(key_pair, KeyPair):
        return key_pair
    public_key = key_pair["publicKey"]
    return KeyPair(
        public_key=public_key,
        secret_key=key_pair.get("secretKey") or key_pair.get("privateKey"),
        id=key_pair.get("id"),
        controller=key_pair.get("controller"),
        modulus_length=resolve_modulus_length(public_key, key_pair.get("modulusLength")),
    )


def _import_jwk(doc: Mapping[str, Any]) -> KeyPair:
    public_key = engine.import_key("jwk", doc["publicKeyJwk"], usages=["verify"])
    secret_key = None
    secret_jwk = _secret_jwk(doc)
    if secret_jwk:
        secret_key = engine.import_key("jwk", secret_jwk, usages=["sign"])
    return KeyPair(
        public_key=public_key,
        secret_key=secret_key,
        id=doc.get("id"),
        controller=doc.get("controller"),
        modulus_length=resolve_modulus_length(
            public_key, doc.get("modulusLength"), doc["publicKeyJwk"]
        ),
    )


def _import_multibase(doc: Mapping[str, Any]) -> KeyPair:
    declared = doc.get("modulusLength") or DEFAULT_MODULUS_LENGTH
    public_key_bytes = from_public_key_multibase(doc["publicKeyMultibase"])
    public_key = key_handle_from_raw(declared, public_key_bytes)
    secret_key = None
    if doc.get("secretKeyMultibase"):
        secret_key_bytes = from_secret_key_multibase(doc["secretKeyMultibase"])
        secret_key = key_handle_from_raw(declared, public_key_bytes, secret_key_bytes)
    return KeyPair(
        public_key=public_key,
        secret_key=secret_key,
        id=doc.get("id"),
        controller=doc.get("controller"),
        modulus_length=resolve_modulus_length(public_key, doc.get("modulusLength")),
    )


_IMPORTERS: Dict[KeyInputKind, Callable[[Any], KeyPair]] = {
    KeyInputKind.NATIVE: _import_native,
    KeyInputKind.JWK: _import_jwk,
    KeyInputKind.MULTIBASE: _import_multibase,
}


def import_key_pair(key_pair: Any) -> KeyPair:
    """
    Normalize a key pair in any supported shape into a KeyPair.

    Accepts a KeyPair (returned unchanged), a mapping holding ``publicKey``
    handles, a document with ``publicKeyJwk`` (and optionally
    ``secretKeyJwk``), or a document with ``publicKeyMultibase`` (and
    optionally ``secretKeyMultibase``).

    Raises:
        InvalidParameterError: If ``key_pair`` is not a mapping or KeyPair.
        UnrecognizedKeyFormatError: If no known key field is present.
    """
    kind = classify_key_input(key_pair)
    logger.debug(f"Importing key pair via {kind.value} path")
    return _IMPORTERS[kind](key_pair)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_key_pair(
    key_pair: Any,
    include_public: bool = True,
    include_secret: bool = False,
    include_context: bool = True,
) -> Dict[str, Any]:
    """
    Export a key pair as a Multikey document.

    The secret half is emitted only when requested AND held by the key pair;
    a public-only pair silently omits it.
    """
    key_pair = import_key_pair(key_pair)
    logger.debug(f"Exporting key pair {key_pair.id or '(no id)'} as Multikey (secret={include_secret and key_pair.has_secret})")

    result: Dict[str, Any] = {"type": MULTIKEY_TYPE}
    if include_context:
        result["@context"] = MULTIKEY_CONTEXT_V1_URL
    if key_pair.id:
        result["id"] = key_pair.id
    if key_pair.controller:
        result["controller"] = key_pair.controller

    if include_public:
        public_key_jwk = engine.export_key("jwk", key_pair.public_key)
        result["publicKeyMultibase"] = to_public_key_multibase(jwk_to_public_bytes(public_key_jwk))
        result["publicKeyJwk"] = public_key_jwk

    if include_secret and key_pair.secret_key is not None:
        secret_key_jwk = engine.export_key("jwk", key_pair.secret_key)
        result["secretKeyMultibase"] = to_secret_key_multibase(jwk_to_secret_bytes(secret_key_jwk))
        result["secretKeyJwk"] = secret_key_jwk

    return result


def export_raw_key_pair(
    key_pair: Any,
    include_public: bool = True,
    include_secret: bool = False,
) -> Dict[str, bytes]:
    """Export a key pair as ``{"publicKey": SPKI DER, "secretKey": PKCS#8 DER}``."""
    key_pair = import_key_pair(key_pair)

    result: Dict[str, bytes] = {}
    if include_public:
        result["publicKey"] = jwk_to_public_bytes(engine.export_key("jwk", key_pair.public_key))
    if include_secret and key_pair.secret_key is not None:
        result["secretKey"] = jwk_to_secret_bytes(engine.export_key("jwk", key_pair.secret_key))
    return result
