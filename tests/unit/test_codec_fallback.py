import pytest

from flexsecure.errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    EmptyInputError,
    MalformedInputError,
)
from flexsecure.services.codec_fallback import DecryptResult, FallbackCodec
from flexsecure.services.gcm_codec import GcmCodec
from flexsecure.services.secure_codec import SecureCodec


@pytest.fixture
def primary():
    return SecureCodec(b"p" * 32)


@pytest.fixture
def legacy():
    return GcmCodec(b"l" * 32)


@pytest.fixture
def fallback(primary, legacy):
    return FallbackCodec(primary, legacy)


def test_encrypt_uses_primary(fallback, primary):
    token = fallback.encrypt("hello")
    assert primary.decrypt(token) == "hello"
    assert fallback.scheme == "cbc-hmac"


def test_primary_token_reports_primary_version(fallback):
    result = fallback.decrypt_versioned(fallback.encrypt("hello"))
    assert result == DecryptResult("hello", "v2", needs_reencrypt=False)


def test_legacy_token_reports_legacy_version(fallback, legacy):
    result = fallback.decrypt_versioned(legacy.encrypt("old value"))
    assert result.plaintext == "old value"
    assert result.version == "v1"
    assert result.needs_reencrypt is True
    assert fallback.decrypt(legacy.encrypt("old value")) == "old value"


def test_reencrypt_moves_legacy_values_to_primary(fallback, legacy, primary):
    legacy_token = legacy.encrypt("migrate me")
    new_token = fallback.reencrypt(legacy_token)
    assert primary.decrypt(new_token) == "migrate me"

    current = fallback.encrypt("already current")
    assert fallback.reencrypt(current) == current


def test_unknown_token_raises_primary_error(fallback):
    # valid hex and valid base64, opened by neither codec
    with pytest.raises(AuthenticationFailedError) as exc:
        fallback.decrypt("00" * 64)
    assert isinstance(exc.value.__cause__, AuthenticationFailedError)

    with pytest.raises(MalformedInputError):
        fallback.decrypt("definitely not a token!")


def test_without_legacy_errors_propagate(primary, legacy):
    codec = FallbackCodec(primary)
    with pytest.raises(MalformedInputError):
        codec.decrypt(legacy.encrypt("old value"))


def test_empty_input_is_not_retried(fallback):
    with pytest.raises(EmptyInputError):
        fallback.encrypt("")


def test_decryption_failure_does_not_fall_back():
    class Broken:
        scheme = "cbc-hmac"

        def encrypt(self, plaintext):
            raise AssertionError("unused")

        def decrypt(self, envelope):
            raise DecryptionFailedError()

    class Opens:
        scheme = "aes-gcm"

        def decrypt(self, envelope):
            raise AssertionError("legacy must not be tried")

    with pytest.raises(DecryptionFailedError):
        FallbackCodec(Broken(), Opens()).decrypt("anything")
