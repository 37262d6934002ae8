import pytest

import rsa_multikey


def test_public_api_exports():
    for name in ("generate", "from_document", "from_jwk", "to_jwk", "from_raw", "KeyPair"):
        assert name in rsa_multikey.__all__
        assert getattr(rsa_multikey, name) is not None


def test_all_names_resolve():
    for name in rsa_multikey.__all__:
        assert hasattr(rsa_multikey, name), name


def test_version():
    assert rsa_multikey.__version__ == "1.0.0"


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        getattr(rsa_multikey, "nonexistent_attribute")


def test_errors_share_base():
    for name in rsa_multikey.__all__:
        if name.endswith("Error") and name != "MultikeyError":
            assert issubclass(getattr(rsa_multikey, name), rsa_multikey.MultikeyError)


def test_generate_via_facade_happy_path():
    key_pair = rsa_multikey.generate(controller="did:example:facade", modulus_length=2048)
    document = key_pair.export(include_secret=True)
    restored = rsa_multikey.from_document(document)
    signature = restored.signer().sign("facade")
    assert key_pair.verifier().verify("facade", signature)
