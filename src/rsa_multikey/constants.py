"""
constants.py — RSA-PSS Multikey constants

Fixed algorithm labels, document markers and accepted modulus lengths shared
by every layer of the package.
"""

ALGORITHM = "RSA-PSS"
HASH_NAME = "SHA-256"
SIGNATURE_ALGORITHM = "PS256"

MULTIKEY_CONTEXT_V1_URL = "https://w3id.org/security/multikey/v1"
MULTIKEY_TYPE = "Multikey"

# Document types whose id/controller are trusted when importing via publicKeyJwk
JWK_WRAPPER_TYPES = ("JsonWebKey", "JsonWebKey2020")

EXTRACTABLE = True

# RSA modulus lengths
RSA_MODULUS_LENGTHS = (2048, 3072, 4096)

# Default modulus length for PS256
DEFAULT_MODULUS_LENGTH = 4096

PUBLIC_EXPONENT = 65537

# SHA-256 digest length
SALT_LENGTH = 32

# multibase base58btc prefix
MULTIBASE_BASE58BTC_PREFIX = "z"

PUBLIC_JWK_FIELDS = ("kty", "n", "e")
SECRET_JWK_FIELDS = ("d", "p", "q", "dp", "dq", "qi")
