"""
keypair.py — The in-memory RSA-PSS key pair.

A KeyPair owns its engine handles and the identity metadata attached to
them. It is immutable: conversions and the facade return new values via
``dataclasses.replace``.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from .constants import DEFAULT_MODULUS_LENGTH
from .engine import KeyHandle
from .errors import MissingParameterError

if TYPE_CHECKING:
    from .factory import Signer, Verifier


@dataclass(frozen=True)
class KeyPair:
    """An RSA-PSS key pair with optional secret half."""
    public_key: KeyHandle
    secret_key: Optional[KeyHandle] = None
    id: Optional[str] = None
    controller: Optional[str] = None
    modulus_length: int = DEFAULT_MODULUS_LENGTH
    public_key_multibase: Optional[str] = None
    secret_key_multibase: Optional[str] = None

    @property
    def has_secret(self) -> bool:
        return self.secret_key is not None

    def export(
        self,
        include_public: bool = True,
        include_secret: bool = False,
        include_context: bool = True,
        raw: bool = False,
    ) -> Dict[str, Any]:
        """Export as a Multikey document, or as DER bytes when ``raw`` is set.

        Args:
            include_public: Emit the public half.
            include_secret: Emit the secret half; ignored for public-only pairs.
            include_context: Emit ``@context`` (document mode only).
            raw: Return ``{"publicKey": bytes, "secretKey": bytes}`` instead.

        Returns:
            Dict[str, Any]: The Multikey document or raw byte pair.
        """
        from .serialize import export_key_pair, export_raw_key_pair
        if raw:
            return export_raw_key_pair(
                self, include_public=include_public, include_secret=include_secret
            )
        return export_key_pair(
            self,
            include_public=include_public,
            include_secret=include_secret,
            include_context=include_context,
        )

    def signer(self) -> "Signer":
        from .factory import create_signer
        if self.secret_key is None:
            raise MissingParameterError("Secret key is required for signing.")
        return create_signer(id=self.id, secret_key=self.secret_key)

    def verifier(self) -> "Verifier":
        from .factory import create_verifier
        return create_verifier(id=self.id, public_key=self.public_key)
