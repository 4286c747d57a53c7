"""Explicit two-codec fallback used while stored values migrate formats.

New values are always written with the primary codec. Reads try the primary
first and only then the legacy codec; there is no format sniffing, and each
codec keeps its own envelope untouched. Callers can use ``needs_reencrypt``
to rewrite legacy values as they are read.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..errors import AuthenticationFailedError, MalformedInputError
from .secure_codec import Codec

# Only these mean "this token is not for the primary codec".
_FALLBACK_ERRORS = (MalformedInputError, AuthenticationFailedError)


@dataclass(frozen=True)
class DecryptResult:
    plaintext: str
    version: str
    needs_reencrypt: bool = False


class FallbackCodec:
    def __init__(
        self,
        primary: Codec,
        legacy: Optional[Codec] = None,
        primary_version: str = "v2",
        legacy_version: str = "v1",
    ):
        self.primary = primary
        self.legacy = legacy
        self.primary_version = primary_version
        self.legacy_version = legacy_version

    @property
    def scheme(self) -> str:
        return self.primary.scheme

    def encrypt(self, plaintext: str) -> str:
        return self.primary.encrypt(plaintext)

    def decrypt(self, envelope: str) -> str:
        return self.decrypt_versioned(envelope).plaintext

    def decrypt_versioned(self, envelope: str) -> DecryptResult:
        try:
            return DecryptResult(self.primary.decrypt(envelope), self.primary_version)
        except _FALLBACK_ERRORS as primary_exc:
            if self.legacy is None:
                raise
            try:
                plaintext = self.legacy.decrypt(envelope)
            except _FALLBACK_ERRORS as legacy_exc:
                raise primary_exc from legacy_exc
            return DecryptResult(plaintext, self.legacy_version, needs_reencrypt=True)

    def reencrypt(self, envelope: str) -> str:
        """Return a primary-format envelope for a value either codec accepts."""
        result = self.decrypt_versioned(envelope)
        if not result.needs_reencrypt:
            return envelope
        return self.primary.encrypt(result.plaintext)
