"""
test_property_roundtrip.py — Property-based checks for the codec layers
and the PS256 signer/verifier.

Properties tested:
  A. base58btc multibase
       A1. Round-trip: decode(encode(b)) == b for arbitrary bytes
       A2. Encoded form always starts with 'z' and is pure base58
       A3. Leading zero bytes survive the round-trip
       A4. Arbitrary text never raises anything but InvalidEncodingError

  B. Signer / verifier
       B1. Valid signature verifies for arbitrary text and binary data
       B2. Any data mutation → False
       B3. Any single-bit signature flip → False
       B4. Garbage signature bytes → False (never raises)

  C. JWK helpers
       C1. b64url_uint round-trips arbitrary non-negative integers
       C2. Text outside the base64url alphabet is rejected
"""

import unittest

import pytest

try:
    from hypothesis import given, settings, assume, HealthCheck
    from hypothesis import strategies as st
except ImportError:
    pytest.skip("hypothesis not installed", allow_module_level=True)

import rsa_multikey
from rsa_multikey.errors import InvalidEncodingError, InvalidKeyMaterialError
from rsa_multikey.helpers import b64url_uint, uint_from_b64url
from rsa_multikey.multibase import decode_multibase, encode_multibase

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")
_B64URL_ALPHABET = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")

# One key for the whole module: RSA generation is too slow to repeat per example
_KEY_PAIR = rsa_multikey.generate(id="#prop", modulus_length=2048)
_SIGNER = _KEY_PAIR.signer()
_VERIFIER = _KEY_PAIR.verifier()

_data = st.one_of(st.text(max_size=256), st.binary(max_size=512))


# ---------------------------------------------------------------------------
# A. Multibase
# ---------------------------------------------------------------------------

class TestPropertyMultibase(unittest.TestCase):

    @given(st.binary(max_size=1024))
    @settings(max_examples=500)
    def test_A1_round_trip(self, data: bytes) -> None:
        self.assertEqual(decode_multibase(encode_multibase(data)), data)

    @given(st.binary(min_size=1, max_size=256))
    @settings(max_examples=300)
    def test_A2_prefix_and_alphabet(self, data: bytes) -> None:
        encoded = encode_multibase(data)
        self.assertTrue(encoded.startswith("z"))
        self.assertTrue(set(encoded[1:]) <= _BASE58_ALPHABET)

    @given(st.integers(min_value=1, max_value=8), st.binary(max_size=64))
    @settings(max_examples=200)
    def test_A3_leading_zeros_preserved(self, zeros: int, tail: bytes) -> None:
        data = b"\x00" * zeros + tail
        self.assertEqual(decode_multibase(encode_multibase(data)), data)

    @given(st.text(max_size=64))
    @settings(max_examples=500)
    def test_A4_arbitrary_text(self, text: str) -> None:
        try:
            result = decode_multibase(text)
        except InvalidEncodingError:
            return
        self.assertIsInstance(result, bytes)


# ---------------------------------------------------------------------------
# B. Sign / verify
# ---------------------------------------------------------------------------

class TestPropertySignVerify(unittest.TestCase):

    @given(_data)
    @settings(max_examples=50, deadline=None)
    def test_B1_valid_signature_verifies(self, data) -> None:
        signature = _SIGNER.sign(data)
        self.assertEqual(len(signature), 256)
        self.assertTrue(_VERIFIER.verify(data, signature))

    @given(st.binary(max_size=256), st.binary(min_size=1, max_size=8))
    @settings(max_examples=50, deadline=None)
    def test_B2_tampered_data_rejected(self, data: bytes, suffix: bytes) -> None:
        signature = _SIGNER.sign(data)
        self.assertFalse(_VERIFIER.verify(data + suffix, signature))

    @given(st.binary(max_size=128), st.integers(min_value=0, max_value=256 * 8 - 1))
    @settings(max_examples=50, deadline=None)
    def test_B3_bit_flip_rejected(self, data: bytes, bit: int) -> None:
        signature = bytearray(_SIGNER.sign(data))
        signature[bit // 8] ^= 1 << (bit % 8)
        self.assertFalse(_VERIFIER.verify(data, bytes(signature)))

    @given(st.binary(max_size=512))
    @settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_B4_garbage_signature(self, garbage: bytes) -> None:
        self.assertIs(_VERIFIER.verify(b"payload", garbage), False)


# ---------------------------------------------------------------------------
# C. JWK helpers
# ---------------------------------------------------------------------------

class TestPropertyJwkHelpers(unittest.TestCase):

    @given(st.integers(min_value=0, max_value=2**4096))
    @settings(max_examples=500)
    def test_C1_uint_round_trip(self, value: int) -> None:
        encoded = b64url_uint(value)
        self.assertNotIn("=", encoded)
        self.assertEqual(uint_from_b64url(encoded, "n"), value)

    @given(
        st.integers(min_value=1, max_value=2**2048),
        st.characters(),
        st.integers(min_value=0),
    )
    @settings(max_examples=500)
    def test_C2_foreign_characters_rejected(self, value: int, char: str, position: int) -> None:
        assume(char not in _B64URL_ALPHABET)
        encoded = b64url_uint(value)
        position %= len(encoded) + 1
        with self.assertRaises(InvalidKeyMaterialError):
            uint_from_b64url(encoded[:position] + char + encoded[position:], "n")


if __name__ == "__main__":
    unittest.main()
