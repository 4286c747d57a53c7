"""AES-256-GCM codec with a base64 envelope.

Envelope: base64( nonce (12 bytes) || ciphertext || tag (16 bytes) ).

This format is not interchangeable with SecureCodec's hex envelope. A
deployment picks one; moving between them goes through FallbackCodec.
"""
from __future__ import annotations
import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..config import SCHEME_AES_GCM, decode_key
from ..errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    EmptyInputError,
    MalformedInputError,
)
from .secure_codec import KEY_SIZE, validate_key

NONCE_SIZE = 12
TAG_SIZE = 16


class GcmCodec:
    __slots__ = ("_aead",)

    scheme = SCHEME_AES_GCM

    def __init__(self, key: bytes):
        self._aead = AESGCM(validate_key(key))

    def __repr__(self) -> str:
        return f"GcmCodec(scheme={self.scheme!r})"

    @staticmethod
    def generate_key() -> bytes:
        return os.urandom(KEY_SIZE)

    @classmethod
    def from_config(cls, value: str) -> "GcmCodec":
        return cls(decode_key(value))

    def encrypt(self, plaintext: str) -> str:
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be str")
        if plaintext == "":
            raise EmptyInputError()
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, envelope: str) -> str:
        if not isinstance(envelope, str):
            raise TypeError("envelope must be str")
        if envelope == "":
            raise MalformedInputError("ciphertext cannot be empty")
        try:
            raw = base64.b64decode(envelope, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedInputError("ciphertext is not valid base64") from None
        # at least one payload byte: encrypt never seals an empty plaintext
        if len(raw) <= NONCE_SIZE + TAG_SIZE:
            raise MalformedInputError()

        try:
            data = self._aead.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        except InvalidTag:
            raise AuthenticationFailedError() from None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailedError("plaintext is not valid UTF-8") from None
