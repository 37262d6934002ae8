"""
factory.py — PS256 signer and verifier capabilities.

A Signer binds a key id to a secret handle, a Verifier binds it to a public
handle. Both expose the fixed algorithm label "PS256" (RSA-PSS, SHA-256,
32-byte salt) and delegate the primitive to the engine.

Data may be a str (signed as its UTF-8 bytes, e.g. a JWT signing input) or
bytes (e.g. Data Integrity hash data).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from . import engine
from .constants import SIGNATURE_ALGORITHM
from .engine import KeyHandle
from .errors import InvalidInputError, InvalidParameterError, MissingParameterError

logger = logging.getLogger(__name__)


def _to_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise InvalidInputError(f'"data" must be a str or bytes, got {type(data).__name__}.')


def _check_id(id: Any) -> None:
    if id is None or id == "":
        raise MissingParameterError('"id" must be a non-empty string.')
    if not isinstance(id, str):
        raise InvalidParameterError('"id" must be a non-empty string.')


@dataclass(frozen=True)
class Signer:
    id: str
    secret_key: KeyHandle = field(repr=False)
    algorithm: str = SIGNATURE_ALGORITHM

    def sign(self, data: Union[str, bytes]) -> bytes:
        """Return the raw RSA-PSS signature over ``data``."""
        return engine.sign(self.secret_key, _to_bytes(data))


@dataclass(frozen=True)
class Verifier:
    id: str
    public_key: KeyHandle = field(repr=False)
    algorithm: str = SIGNATURE_ALGORITHM

    def verify(self, data: Union[str, bytes], signature: bytes) -> bool:
        """
        Verify ``signature`` over ``data``.

        Returns True if valid, False if the signature does not match. Wrong
        argument types raise InvalidInputError before the engine is called;
        a handle that does not permit "verify" raises InvalidKeyMaterialError.
        """
        payload = _to_bytes(data)
        if not isinstance(signature, (bytes, bytearray)):
            raise InvalidInputError(f'"signature" must be bytes, got {type(signature).__name__}.')
        valid = engine.verify(self.public_key, bytes(signature), payload)
        if not valid:
            logger.debug(f"Signature mismatch for {self.id}")
        return valid


def create_signer(id: Optional[str] = None, secret_key: Optional[KeyHandle] = None) -> Signer:
    """Create a PS256 signer for ``id`` backed by ``secret_key``."""
    _check_id(id)
    if secret_key is None:
        raise MissingParameterError('"secret_key" is required.')
    if not isinstance(secret_key, KeyHandle) or secret_key.type != "private":
        raise InvalidParameterError('"secret_key" must be a secret KeyHandle.')
    return Signer(id=id, secret_key=secret_key)


def create_verifier(id: Optional[str] = None, public_key: Optional[KeyHandle] = None) -> Verifier:
    """Create a PS256 verifier for ``id`` backed by ``public_key``."""
    _check_id(id)
    if public_key is None:
        raise MissingParameterError('"public_key" is required.')
    if not isinstance(public_key, KeyHandle) or public_key.type != "public":
        raise InvalidParameterError('"public_key" must be a public KeyHandle.')
    return Verifier(id=id, public_key=public_key)
