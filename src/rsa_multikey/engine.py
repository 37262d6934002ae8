"""
engine.py — RSA-PSS Key Engine

Narrow capability layer over the ``cryptography`` package. Everything above
this module treats keys as opaque ``KeyHandle`` values and reaches the RSA-PSS
primitive only through:

  - generate_key_pair(modulus_length, public_exponent)
  - import_key(format, material, usages)    format: "jwk" | "spki" | "pkcs8"
  - export_key(format, handle)
  - sign(handle, data)                      RSA-PSS, SHA-256, salt length 32
  - verify(handle, signature, data) -> bool

Handles carry the usages they were imported with ("verify" for public keys,
"sign" for secret keys) and refuse operations outside them.

Dependencies:
  - cryptography >= 41.0 (pip install cryptography)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Mapping, NamedTuple, Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_der_private_key,
    load_der_public_key,
)

from .constants import (
    ALGORITHM,
    EXTRACTABLE,
    HASH_NAME,
    PUBLIC_EXPONENT,
    SALT_LENGTH,
    SECRET_JWK_FIELDS,
    SIGNATURE_ALGORITHM,
)
from .errors import InvalidKeyMaterialError, InvalidParameterError
from .helpers import b64url_uint, uint_from_b64url

logger = logging.getLogger(__name__)

KEY_FORMATS = ("jwk", "spki", "pkcs8")

_ALLOWED_USAGES = {
    "public": frozenset({"verify"}),
    "private": frozenset({"sign"}),
}


# ---------------------------------------------------------------------------
# Handles
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class KeyHandle:
    """An RSA-PSS key held by the engine, with its permitted usages."""
    key: Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]
    usages: FrozenSet[str]
    extractable: bool = EXTRACTABLE

    @property
    def type(self) -> str:
        return "private" if isinstance(self.key, rsa.RSAPrivateKey) else "public"

    @property
    def modulus_length(self) -> int:
        return self.key.key_size

    @property
    def public_exponent(self) -> int:
        if isinstance(self.key, rsa.RSAPrivateKey):
            return self.key.private_numbers().public_numbers.e
        return self.key.public_numbers().e

    @property
    def algorithm(self) -> Dict[str, Any]:
        return {
            "name": ALGORITHM,
            "hash": HASH_NAME,
            "modulusLength": self.modulus_length,
            "publicExponent": self.public_exponent,
        }


class GeneratedKeyPair(NamedTuple):
    public_key: KeyHandle
    secret_key: KeyHandle


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def generate_key_pair(
    modulus_length: int,
    public_exponent: int = PUBLIC_EXPONENT,
) -> GeneratedKeyPair:
    """Generate a fresh RSA-PSS key pair (public handle: verify, secret handle: sign)."""
    try:
        sk = rsa.generate_private_key(public_exponent=public_exponent, key_size=modulus_length)
    except (ValueError, TypeError) as exc:
        raise InvalidParameterError(f"Cannot generate RSA key: {exc}") from exc
    logger.debug(f"Generated {ALGORITHM} key pair ({modulus_length} bits)")
    return GeneratedKeyPair(
        public_key=KeyHandle(sk.public_key(), _ALLOWED_USAGES["public"]),
        secret_key=KeyHandle(sk, _ALLOWED_USAGES["private"]),
    )


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def import_key(
    key_format: str,
    material: Any,
    usages: Iterable[str],
    modulus_length: Optional[int] = None,
    extractable: bool = EXTRACTABLE,
) -> KeyHandle:
    """
    Import key material into a KeyHandle.

    ``modulus_length`` is the caller's declared size; DER and JWK material
    carry their own modulus, so a mismatch is logged and the material wins.
    """
    if key_format == "jwk":
        key = _key_from_jwk(material)
    elif key_format == "spki":
        key = _load_spki(material)
    elif key_format == "pkcs8":
        key = _load_pkcs8(material)
    else:
        raise InvalidParameterError(f'Unsupported key format "{key_format}"; expected one of {KEY_FORMATS}.')

    handle = KeyHandle(key, frozenset(usages), extractable)
    allowed = _ALLOWED_USAGES[handle.type]
    if not handle.usages <= allowed:
        raise InvalidKeyMaterialError(
            f"Usages {sorted(handle.usages)} are not valid for a {handle.type} key; allowed: {sorted(allowed)}."
        )
    if modulus_length and modulus_length != handle.modulus_length:
        logger.debug(
            f"Declared modulus length {modulus_length} differs from imported key ({handle.modulus_length} bits)"
        )
    return handle


def _key_from_jwk(jwk: Any) -> Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]:
    if not isinstance(jwk, Mapping):
        raise InvalidKeyMaterialError('"jwk" must be an object.')
    if jwk.get("kty") != "RSA":
        raise InvalidKeyMaterialError('JWK "kty" must be "RSA".')
    alg = jwk.get("alg")
    if alg is not None and alg != SIGNATURE_ALGORITHM:
        raise InvalidKeyMaterialError(f'JWK "alg" must be "{SIGNATURE_ALGORITHM}", got "{alg}".')

    public_numbers = rsa.RSAPublicNumbers(
        e=uint_from_b64url(jwk.get("e"), "e"),
        n=uint_from_b64url(jwk.get("n"), "n"),
    )
    present = [field for field in SECRET_JWK_FIELDS if jwk.get(field) is not None]
    if present and len(present) != len(SECRET_JWK_FIELDS):
        raise InvalidKeyMaterialError(
            f"JWK secret members {', '.join(SECRET_JWK_FIELDS)} must be present together; got {', '.join(present)}."
        )

    if not present:
        try:
            return public_numbers.public_key()
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise InvalidKeyMaterialError(f"Invalid RSA public key: {exc}") from exc

    private_numbers = rsa.RSAPrivateNumbers(
        p=uint_from_b64url(jwk["p"], "p"),
        q=uint_from_b64url(jwk["q"], "q"),
        d=uint_from_b64url(jwk["d"], "d"),
        dmp1=uint_from_b64url(jwk["dp"], "dp"),
        dmq1=uint_from_b64url(jwk["dq"], "dq"),
        iqmp=uint_from_b64url(jwk["qi"], "qi"),
        public_numbers=public_numbers,
    )
    try:
        return private_numbers.private_key()
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterialError(f"Invalid RSA private key: {exc}") from exc


def _require_bytes(material: Any, name: str) -> bytes:
    if not isinstance(material, (bytes, bytearray, memoryview)):
        raise InvalidKeyMaterialError(f'"{name}" material must be bytes.')
    return bytes(material)


def _load_spki(material: Any) -> rsa.RSAPublicKey:
    der = _require_bytes(material, "spki")
    try:
        key = load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterialError(f"Invalid SPKI DER: {exc}") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidKeyMaterialError("SPKI DER does not hold an RSA public key.")
    return key


def _load_pkcs8(material: Any) -> rsa.RSAPrivateKey:
    der = _require_bytes(material, "pkcs8")
    try:
        key = load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterialError(f"Invalid PKCS#8 DER: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyMaterialError("PKCS#8 DER does not hold an RSA private key.")
    return key


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_key(key_format: str, handle: KeyHandle) -> Union[Dict[str, str], bytes]:
    """Export a handle as a JWK dict, SPKI DER (public) or PKCS#8 DER (secret)."""
    if not isinstance(handle, KeyHandle):
        raise InvalidParameterError('"handle" must be a KeyHandle.')
    if not handle.extractable:
        raise InvalidKeyMaterialError("Key is not extractable.")

    if key_format == "jwk":
        return _jwk_from_key(handle.key)
    if key_format == "spki":
        if handle.type != "public":
            raise InvalidKeyMaterialError('Only public keys can be exported as "spki".')
        return handle.key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)
    if key_format == "pkcs8":
        if handle.type != "private":
            raise InvalidKeyMaterialError('Only secret keys can be exported as "pkcs8".')
        return handle.key.private_bytes(Encoding.DER, PrivateFormat.PKCS8, NoEncryption())
    raise InvalidParameterError(f'Unsupported key format "{key_format}"; expected one of {KEY_FORMATS}.')


def _jwk_from_key(key: Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]) -> Dict[str, str]:
    if isinstance(key, rsa.RSAPrivateKey):
        numbers = key.private_numbers()
        pub = numbers.public_numbers
        jwk = {"kty": "RSA", "n": b64url_uint(pub.n), "e": b64url_uint(pub.e)}
        jwk.update({
            "d": b64url_uint(numbers.d),
            "p": b64url_uint(numbers.p),
            "q": b64url_uint(numbers.q),
            "dp": b64url_uint(numbers.dmp1),
            "dq": b64url_uint(numbers.dmq1),
            "qi": b64url_uint(numbers.iqmp),
        })
    else:
        pub = key.public_numbers()
        jwk = {"kty": "RSA", "n": b64url_uint(pub.n), "e": b64url_uint(pub.e)}
    jwk["alg"] = SIGNATURE_ALGORITHM
    return jwk


# ---------------------------------------------------------------------------
# Sign / verify
# ---------------------------------------------------------------------------

def _pss() -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=SALT_LENGTH)


def _check_usage(handle: Any, usage: str) -> None:
    if not isinstance(handle, KeyHandle):
        raise InvalidParameterError('"handle" must be a KeyHandle.')
    if usage not in handle.usages:
        raise InvalidKeyMaterialError(f'Key does not permit "{usage}" (usages: {sorted(handle.usages)}).')


def sign(handle: KeyHandle, data: bytes) -> bytes:
    """Sign ``data`` with RSA-PSS / SHA-256 / salt length 32."""
    _check_usage(handle, "sign")
    return handle.key.sign(bytes(data), _pss(), hashes.SHA256())


def verify(handle: KeyHandle, signature: bytes, data: bytes) -> bool:
    """
    Verify an RSA-PSS signature.

    Returns True if valid, False if the signature does not match.
    """
    _check_usage(handle, "verify")
    try:
        handle.key.verify(bytes(signature), bytes(data), _pss(), hashes.SHA256())
        return True
    except InvalidSignature:
        return False
