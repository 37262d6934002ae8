"""RSA-PSS Multikey public API.

This module exposes the key pair facade: generation, import from Multikey,
JWK and raw DER forms, export to JWK, plus the PS256 signer/verifier
factories reachable from every ``KeyPair``.

Example:
    import rsa_multikey

    key_pair = rsa_multikey.generate(controller="did:example:1234", modulus_length=2048)
    signature = key_pair.signer().sign("test 1234")
    assert key_pair.verifier().verify("test 1234", signature)

    document = key_pair.export(include_secret=True)
    restored = rsa_multikey.from_document(document)
"""

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

from . import engine
from .constants import (
    DEFAULT_MODULUS_LENGTH,
    JWK_WRAPPER_TYPES,
    MULTIKEY_CONTEXT_V1_URL,
    MULTIKEY_TYPE,
    PUBLIC_EXPONENT,
    PUBLIC_JWK_FIELDS,
    RSA_MODULUS_LENGTHS,
    SECRET_JWK_FIELDS,
    SIGNATURE_ALGORITHM,
)
from .engine import KeyHandle
from .errors import (
    MultikeyError,
    InvalidParameterError,
    MissingParameterError,
    InvalidInputError,
    InvalidEncodingError,
    InvalidKeyMaterialError,
    MissingPrivateMaterialError,
    UnrecognizedKeyFormatError,
    InvalidMultikeyError,
)
from .factory import Signer, Verifier, create_signer, create_verifier
from .helpers import is_modulus_number, modulus_length_from_jwk, public_jwk, secret_key_size
from .keypair import KeyPair
from .serialize import (
    export_key_pair,
    export_raw_key_pair,
    import_key_pair,
    key_handle_from_raw,
    to_public_key_multibase_from_jwk,
    to_secret_key_multibase_from_jwk,
)
from .translators import to_multikey


def generate(
    id: Optional[str] = None,
    controller: Optional[str] = None,
    modulus_length: int = DEFAULT_MODULUS_LENGTH,
) -> KeyPair:
    """Generate a new RSA-PSS key pair for PS256 signing.

    Args:
        id: Optional key id. Derived from the public key when omitted.
        controller: Optional controller (DID).
        modulus_length: RSA modulus length: 2048, 3072 or 4096.

    Returns:
        KeyPair: Key pair with both halves and materialized multibase fields.

    Raises:
        InvalidParameterError: If ``modulus_length`` is not supported.

    Example:
        key_pair = generate(controller="did:example:1234")
        key_pair.id  # "did:example:1234#z..."
    """
    if (
        isinstance(modulus_length, bool)
        or not isinstance(modulus_length, int)
        or modulus_length not in RSA_MODULUS_LENGTHS
    ):
        raise InvalidParameterError('"modulusLength" must be one of: 2048, 3072, or 4096.')

    generated = engine.generate_key_pair(modulus_length, PUBLIC_EXPONENT)
    key_pair = _create_key_pair_interface(
        KeyPair(
            public_key=generated.public_key,
            secret_key=generated.secret_key,
            modulus_length=modulus_length,
        ),
        modulus_length=modulus_length,
    )
    if not id:
        if controller:
            id = f"{controller}#{key_pair.public_key_multibase}"
        else:
            id = f"#{key_pair.public_key_multibase}"
    return replace(key_pair, id=id, controller=controller)


def from_document(document: Mapping[str, Any]) -> KeyPair:
    """Import a key pair from a Multikey (or JWK-wrapping) document.

    Resolution order:
      1. ``type`` other than "Multikey" with ``publicKeyJwk``: load through
         ``from_jwk``; ``id``/``controller`` are kept only for
         JsonWebKey / JsonWebKey2020 documents.
      2. Any other declared ``type``: coerce with ``to_multikey`` and import.
      3. Otherwise treat as Multikey: default ``type`` and ``@context``,
         derive ``id`` from ``controller``, validate and import.

    Args:
        document: The serialized key document. It is not modified.

    Returns:
        KeyPair: The imported key pair.

    Raises:
        InvalidMultikeyError: If the document fails Multikey validation.
        UnrecognizedKeyFormatError: If it carries no key material.
    """
    if not isinstance(document, Mapping):
        raise InvalidMultikeyError('"key" must be an object.')
    multikey = dict(document)
    doc_type = multikey.get("type")

    if doc_type != MULTIKEY_TYPE:
        if multikey.get("publicKeyJwk"):
            id = controller = None
            if doc_type in JWK_WRAPPER_TYPES:
                id = multikey.get("id")
                controller = multikey.get("controller")
            secret_jwk = multikey.get("secretKeyJwk") or multikey.get("privateKeyJwk")
            return from_jwk(
                jwk=secret_jwk or multikey["publicKeyJwk"],
                secret_key=bool(secret_jwk),
                id=id,
                controller=controller,
            )
        if doc_type:
            return _create_key_pair_interface(to_multikey(multikey))

    if not doc_type:
        multikey["type"] = MULTIKEY_TYPE
    if not multikey.get("@context"):
        multikey["@context"] = MULTIKEY_CONTEXT_V1_URL
    if multikey.get("controller") and not multikey.get("id") and multikey.get("publicKeyMultibase"):
        multikey["id"] = f"{multikey['controller']}#{multikey['publicKeyMultibase']}"

    _assert_multikey(multikey)
    return _create_key_pair_interface(multikey)


def from_jwk(
    jwk: Optional[Mapping[str, Any]] = None,
    secret_key: bool = False,
    id: Optional[str] = None,
    controller: Optional[str] = None,
) -> KeyPair:
    """Import a key pair from an RSA JWK.

    Args:
        jwk: The JWK (``kty`` must be "RSA").
        secret_key: Import the secret half when the JWK carries ``d``.
        id: Optional key id.
        controller: Optional controller (DID).

    Returns:
        KeyPair: The imported key pair.

    Raises:
        MissingParameterError: If ``jwk`` is missing.
        InvalidParameterError: If ``jwk`` is not an RSA JWK object.
        InvalidKeyMaterialError: If the engine rejects the key members.
    """
    if jwk is None:
        raise MissingParameterError('"jwk" is required.')
    if not isinstance(jwk, Mapping):
        raise InvalidParameterError('"jwk" must be an object.')
    if jwk.get("kty") != "RSA":
        raise InvalidParameterError('JWK must have kty "RSA".')

    modulus_length = modulus_length_from_jwk(jwk)
    alg = jwk.get("alg") or SIGNATURE_ALGORITHM
    multikey: Dict[str, Any] = {
        "@context": MULTIKEY_CONTEXT_V1_URL,
        "type": MULTIKEY_TYPE,
        "publicKeyMultibase": to_public_key_multibase_from_jwk(public_jwk(jwk)),
        "publicKeyJwk": {**{field: jwk.get(field) for field in PUBLIC_JWK_FIELDS}, "alg": alg},
        "modulusLength": modulus_length,
    }
    if isinstance(id, str):
        multikey["id"] = id
    if isinstance(controller, str):
        multikey["controller"] = controller
    if secret_key and jwk.get("d"):
        multikey["secretKeyMultibase"] = to_secret_key_multibase_from_jwk(jwk)
        multikey["secretKeyJwk"] = {
            **{field: jwk.get(field) for field in PUBLIC_JWK_FIELDS + SECRET_JWK_FIELDS},
            "alg": alg,
        }
    return from_document(multikey)


def to_jwk(key_pair: Any, secret_key: bool = False) -> Dict[str, str]:
    """Export a key pair as a JWK.

    Args:
        key_pair: A KeyPair or any document ``import_key_pair`` accepts.
        secret_key: Export the secret JWK when the key pair holds one.

    Returns:
        Dict[str, str]: The JWK, always carrying ``alg``.
    """
    key_pair = import_key_pair(key_pair)
    use_secret = secret_key and key_pair.secret_key is not None
    handle = key_pair.secret_key if use_secret else key_pair.public_key
    jwk = engine.export_key("jwk", handle)
    if not jwk.get("alg"):
        jwk["alg"] = SIGNATURE_ALGORITHM
    return jwk


def from_raw(
    modulus_length: Any = None,
    public_key: Any = None,
    secret_key: Any = None,
) -> KeyPair:
    """Import a key pair from DER bytes.

    Args:
        modulus_length: The RSA modulus length in bits.
        public_key: SPKI DER bytes.
        secret_key: Optional PKCS#8 DER bytes; when given the key pair is
            derived from it.

    Returns:
        KeyPair: The imported key pair.

    Raises:
        InvalidParameterError: If any argument has the wrong type.
        InvalidKeyMaterialError: If the DER bytes are not an RSA key.
    """
    if not is_modulus_number(modulus_length):
        raise InvalidParameterError('"modulusLength" must be a number.')
    if secret_key is not None and not isinstance(secret_key, (bytes, bytearray)):
        raise InvalidParameterError('"secretKey" must be bytes.')
    if not isinstance(public_key, (bytes, bytearray)):
        raise InvalidParameterError('"publicKey" must be bytes.')

    handle = key_handle_from_raw(modulus_length, public_key, secret_key)
    jwk = engine.export_key("jwk", handle)
    return from_jwk(jwk=jwk, secret_key=secret_key is not None)


def _create_key_pair_interface(key_pair: Any, modulus_length: Optional[int] = None) -> KeyPair:
    """Import ``key_pair`` and materialize its multibase fields."""
    key_pair = import_key_pair(key_pair)
    if not modulus_length:
        modulus_length = key_pair.modulus_length

    exported = export_key_pair(key_pair, include_public=True, include_secret=True)
    return replace(
        key_pair,
        modulus_length=modulus_length,
        public_key_multibase=exported["publicKeyMultibase"],
        secret_key_multibase=exported.get("secretKeyMultibase"),
    )


def _assert_multikey(key: Any) -> None:
    """Raise InvalidMultikeyError unless ``key`` is a Multikey document."""
    if not isinstance(key, Mapping):
        raise InvalidMultikeyError('"key" must be an object.')
    if key.get("type") != MULTIKEY_TYPE:
        raise InvalidMultikeyError('"key" must be a Multikey with type "Multikey".')
    context = key.get("@context")
    if not (
        context == MULTIKEY_CONTEXT_V1_URL
        or (isinstance(context, (list, tuple)) and MULTIKEY_CONTEXT_V1_URL in context)
    ):
        raise InvalidMultikeyError(f'"key" must be a Multikey with context "{MULTIKEY_CONTEXT_V1_URL}".')


__version__ = "1.0.0"
__all__ = [
    "generate",
    "from_document",
    "from_jwk",
    "to_jwk",
    "from_raw",
    "KeyPair",
    "KeyHandle",
    "Signer",
    "Verifier",
    "create_signer",
    "create_verifier",
    "import_key_pair",
    "export_key_pair",
    "export_raw_key_pair",
    "to_multikey",
    "secret_key_size",
    "MULTIKEY_CONTEXT_V1_URL",
    "MultikeyError",
    "InvalidParameterError",
    "MissingParameterError",
    "InvalidInputError",
    "InvalidEncodingError",
    "InvalidKeyMaterialError",
    "MissingPrivateMaterialError",
    "UnrecognizedKeyFormatError",
    "InvalidMultikeyError",
]
