"""AES-256-CBC + HMAC-SHA256 codec for sensitive string values.

Envelope (hex encoded, lowercase on output)::

    IV (16 bytes) || HMAC-SHA256(key, ciphertext) (32 bytes) || ciphertext (16*n bytes)

The layout and the single shared key for AES and HMAC match the PHP
counterpart (bin2hex / hex2bin), so values written by either side can be read
by the other. The HMAC is verified before any decryption happens.
"""
from __future__ import annotations
import binascii
import os
from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..config import SCHEME_CBC_HMAC, decode_key
from ..errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    EmptyInputError,
    InvalidKeyError,
    MalformedInputError,
)

KEY_SIZE = 32
BLOCK_SIZE = 16
IV_SIZE = BLOCK_SIZE
TAG_SIZE = 32
MIN_ENVELOPE_SIZE = IV_SIZE + TAG_SIZE + BLOCK_SIZE


class Codec(Protocol):
    """Encrypt/decrypt capability handed to consumers."""

    scheme: str

    def encrypt(self, plaintext: str) -> str: ...
    def decrypt(self, envelope: str) -> str: ...


def validate_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or not key:
        raise InvalidKeyError("encryption key is empty or not set")
    if len(key) != KEY_SIZE:
        raise InvalidKeyError(f"encryption key must be exactly {KEY_SIZE} bytes")
    return bytes(key)


def envelope_length(plaintext: str) -> int:
    """Length of the hex envelope produced for ``plaintext``."""
    data_len = len(plaintext.encode("utf-8"))
    padded = (data_len // BLOCK_SIZE + 1) * BLOCK_SIZE
    return 2 * (IV_SIZE + TAG_SIZE + padded)


class SecureCodec:
    """Immutable after construction; safe to share between threads."""

    __slots__ = ("_key",)

    scheme = SCHEME_CBC_HMAC

    def __init__(self, key: bytes):
        self._key = validate_key(key)

    def __repr__(self) -> str:
        return f"SecureCodec(scheme={self.scheme!r})"

    @staticmethod
    def generate_key() -> bytes:
        return os.urandom(KEY_SIZE)

    @classmethod
    def from_config(cls, value: str) -> "SecureCodec":
        return cls(decode_key(value))

    def _tag(self, ciphertext: bytes) -> hmac.HMAC:
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(ciphertext)
        return mac

    def encrypt(self, plaintext: str) -> str:
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be str")
        if plaintext == "":
            raise EmptyInputError()

        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        tag = self._tag(ciphertext).finalize()

        return (iv + tag + ciphertext).hex()

    def decrypt(self, envelope: str) -> str:
        if not isinstance(envelope, str):
            raise TypeError("envelope must be str")
        if envelope == "":
            raise MalformedInputError("ciphertext cannot be empty")
        try:
            raw = binascii.unhexlify(envelope)
        except ValueError:
            # binascii.Error and non-ASCII input both land here
            raise MalformedInputError("ciphertext is not valid hex") from None

        if len(raw) < MIN_ENVELOPE_SIZE or (len(raw) - IV_SIZE - TAG_SIZE) % BLOCK_SIZE:
            raise MalformedInputError()

        iv = raw[:IV_SIZE]
        tag = raw[IV_SIZE:IV_SIZE + TAG_SIZE]
        ciphertext = raw[IV_SIZE + TAG_SIZE:]

        # Authenticate first; nothing below runs for forged input.
        try:
            self._tag(ciphertext).verify(tag)
        except InvalidSignature:
            raise AuthenticationFailedError() from None

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionFailedError("invalid padding") from None
        if not data:
            raise DecryptionFailedError("empty plaintext")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailedError("plaintext is not valid UTF-8") from None
