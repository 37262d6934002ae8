"""
errors.py — RSA Multikey Error Taxonomy

Standardized error codes and messages for key conversion, validation and
sign/verify input checks. Each concrete error also derives from the builtin
exception a Python caller would expect (TypeError for bad arguments,
ValueError for bad key material or encodings).
"""

from typing import Optional

__all__ = [
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

class MultikeyError(Exception):
    """Base class for all rsa-multikey errors."""
    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.context = context

        full_msg = f"[{code}] {message}"
        if context:
            full_msg += f" Context: {context}"

        super().__init__(full_msg)

# Argument Errors (E1xx)
class InvalidParameterError(MultikeyError, TypeError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E100", "A parameter has an unsupported value or the wrong type.", context)

class MissingParameterError(MultikeyError, TypeError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E101", "A required parameter is absent.", context)

class InvalidInputError(MultikeyError, TypeError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E102", "Data or signature passed to sign/verify has an unsupported type.", context)

# Encoding Errors (E2xx)
class InvalidEncodingError(MultikeyError, ValueError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E200", "A multibase value is not a valid base58btc string with the 'z' prefix.", context)

# Key Material Errors (E3xx)
class InvalidKeyMaterialError(MultikeyError, ValueError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E300", "The key engine rejected the supplied key material.", context)

class MissingPrivateMaterialError(MultikeyError, ValueError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E301", "The JWK does not contain private key material.", context)

# Document Errors (E4xx)
class UnrecognizedKeyFormatError(MultikeyError, ValueError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E400", "Key pair must have a native handle, publicKeyJwk or publicKeyMultibase.", context)

class InvalidMultikeyError(MultikeyError, TypeError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("MULTIKEY_E401", "The document is not a valid Multikey.", context)
