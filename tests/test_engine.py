"""
test_engine.py — RSA-PSS engine capability surface.

Covers generation, JWK/SPKI/PKCS#8 import and export, usage enforcement and
the sign/verify primitive, including its rejection branches.
"""

import unittest

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from rsa_multikey import engine
from rsa_multikey.engine import KeyHandle, export_key, generate_key_pair, import_key
from rsa_multikey.errors import InvalidKeyMaterialError, InvalidParameterError


class TestGenerateKeyPair(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.generated = generate_key_pair(2048)

    def test_handles_have_expected_types(self):
        self.assertEqual(self.generated.public_key.type, "public")
        self.assertEqual(self.generated.secret_key.type, "private")

    def test_usages(self):
        self.assertEqual(self.generated.public_key.usages, frozenset({"verify"}))
        self.assertEqual(self.generated.secret_key.usages, frozenset({"sign"}))

    def test_algorithm_description(self):
        algorithm = self.generated.public_key.algorithm
        self.assertEqual(algorithm["name"], "RSA-PSS")
        self.assertEqual(algorithm["hash"], "SHA-256")
        self.assertEqual(algorithm["modulusLength"], 2048)
        self.assertEqual(algorithm["publicExponent"], 65537)
        self.assertEqual(self.generated.secret_key.algorithm, algorithm)

    def test_invalid_size_rejected(self):
        with self.assertRaises(InvalidParameterError):
            generate_key_pair(512)


class TestJwkImportExport(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.generated = generate_key_pair(2048)
        cls.public_jwk = export_key("jwk", cls.generated.public_key)
        cls.secret_jwk = export_key("jwk", cls.generated.secret_key)

    def test_public_jwk_members(self):
        self.assertEqual(set(self.public_jwk), {"kty", "n", "e", "alg"})
        self.assertEqual(self.public_jwk["kty"], "RSA")
        self.assertEqual(self.public_jwk["e"], "AQAB")
        self.assertEqual(self.public_jwk["alg"], "PS256")

    def test_secret_jwk_members(self):
        self.assertEqual(
            set(self.secret_jwk),
            {"kty", "n", "e", "alg", "d", "p", "q", "dp", "dq", "qi"},
        )
        self.assertEqual(self.secret_jwk["n"], self.public_jwk["n"])

    def test_jwk_roundtrip_is_deterministic(self):
        handle = import_key("jwk", self.secret_jwk, usages=["sign"])
        self.assertEqual(export_key("jwk", handle), self.secret_jwk)
        handle = import_key("jwk", self.public_jwk, usages=["verify"])
        self.assertEqual(export_key("jwk", handle), self.public_jwk)

    def test_jwk_without_alg_accepted(self):
        jwk = {k: v for k, v in self.public_jwk.items() if k != "alg"}
        handle = import_key("jwk", jwk, usages=["verify"])
        self.assertEqual(handle.modulus_length, 2048)

    def test_wrong_alg_rejected(self):
        jwk = dict(self.public_jwk, alg="RS256")
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", jwk, usages=["verify"])

    def test_wrong_kty_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", dict(self.public_jwk, kty="EC"), usages=["verify"])

    def test_partial_secret_members_rejected(self):
        jwk = {k: v for k, v in self.secret_jwk.items() if k != "qi"}
        with self.assertRaisesRegex(InvalidKeyMaterialError, "present together"):
            import_key("jwk", jwk, usages=["sign"])

    def test_inconsistent_secret_rejected(self):
        other = export_key("jwk", generate_key_pair(2048).secret_key)
        jwk = dict(self.secret_jwk, d=other["d"])
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", jwk, usages=["sign"])

    def test_even_exponent_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", dict(self.public_jwk, e="Ag"), usages=["verify"])

    def test_non_mapping_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", "not a jwk", usages=["verify"])

    def test_usage_mismatch_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", self.public_jwk, usages=["sign"])
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("jwk", self.secret_jwk, usages=["verify"])


class TestDerImportExport(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.generated = generate_key_pair(2048)

    def test_spki_roundtrip(self):
        spki = export_key("spki", self.generated.public_key)
        handle = import_key("spki", spki, usages=["verify"], modulus_length=2048)
        self.assertEqual(export_key("spki", handle), spki)

    def test_pkcs8_roundtrip(self):
        pkcs8 = export_key("pkcs8", self.generated.secret_key)
        handle = import_key("pkcs8", pkcs8, usages=["sign"])
        self.assertEqual(export_key("pkcs8", handle), pkcs8)

    def test_spki_of_secret_key_refused(self):
        with self.assertRaises(InvalidKeyMaterialError):
            export_key("spki", self.generated.secret_key)

    def test_pkcs8_of_public_key_refused(self):
        with self.assertRaises(InvalidKeyMaterialError):
            export_key("pkcs8", self.generated.public_key)

    def test_garbage_der_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("spki", b"\x30\x03\x02\x01\x00", usages=["verify"])
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("pkcs8", b"not der", usages=["sign"])

    def test_non_rsa_spki_rejected(self):
        ec_spki = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            Encoding.DER, PublicFormat.SubjectPublicKeyInfo
        )
        with self.assertRaisesRegex(InvalidKeyMaterialError, "RSA"):
            import_key("spki", ec_spki, usages=["verify"])

    def test_non_bytes_rejected(self):
        with self.assertRaises(InvalidKeyMaterialError):
            import_key("spki", "MIIB", usages=["verify"])

    def test_declared_modulus_mismatch_is_not_fatal(self):
        spki = export_key("spki", self.generated.public_key)
        handle = import_key("spki", spki, usages=["verify"], modulus_length=4096)
        self.assertEqual(handle.modulus_length, 2048)

    def test_unknown_format_rejected(self):
        with self.assertRaises(InvalidParameterError):
            import_key("raw", b"", usages=["verify"])
        with self.assertRaises(InvalidParameterError):
            export_key("raw", self.generated.public_key)

    def test_non_extractable_refused(self):
        handle = KeyHandle(self.generated.public_key.key, frozenset({"verify"}), extractable=False)
        with self.assertRaises(InvalidKeyMaterialError):
            export_key("jwk", handle)


class TestSignVerify(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.generated = generate_key_pair(2048)

    def test_sign_verify(self):
        signature = engine.sign(self.generated.secret_key, b"payload")
        self.assertEqual(len(signature), 256)
        self.assertTrue(engine.verify(self.generated.public_key, signature, b"payload"))

    def test_signature_uses_pss_with_32_byte_salt(self):
        signature = engine.sign(self.generated.secret_key, b"payload")
        # raises InvalidSignature if the parameters differ
        self.generated.public_key.key.verify(
            signature,
            b"payload",
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=32),
            hashes.SHA256(),
        )

    def test_wrong_data_returns_false(self):
        signature = engine.sign(self.generated.secret_key, b"payload")
        self.assertFalse(engine.verify(self.generated.public_key, signature, b"payloae"))

    def test_garbage_signature_returns_false(self):
        self.assertFalse(engine.verify(self.generated.public_key, b"\x00" * 256, b"payload"))

    def test_sign_with_public_key_refused(self):
        with self.assertRaises(InvalidKeyMaterialError):
            engine.sign(self.generated.public_key, b"payload")

    def test_verify_with_secret_key_refused(self):
        with self.assertRaises(InvalidKeyMaterialError):
            engine.verify(self.generated.secret_key, b"sig", b"payload")

    def test_non_handle_refused(self):
        with pytest.raises(InvalidParameterError):
            engine.sign(rsa.generate_private_key(65537, 2048), b"payload")
