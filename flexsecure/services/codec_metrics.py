"""Prometheus counters and security-event logging around a codec.

The wrapped codec stays free of side effects; everything observable lives
here. Log events carry the scheme, the operation and the error code, never
plaintext, envelope content or key material.
"""
from __future__ import annotations

import structlog
from prometheus_client import Counter

from ..errors import AuthenticationFailedError, SecureCodecError
from .secure_codec import Codec

logger = structlog.get_logger(__name__)

CODEC_OPERATION_COUNT = Counter(
    "flexsecure_codec_operations_total",
    "Codec operations by outcome",
    ["operation", "scheme", "outcome"],
)


class InstrumentedCodec:
    def __init__(self, codec: Codec):
        self.codec = codec

    @property
    def scheme(self) -> str:
        return self.codec.scheme

    def __getattr__(self, name):
        # plain attributes only (primary, legacy, versions); operations go through _observe
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.codec, name)

    def _record(self, operation: str, outcome: str) -> None:
        CODEC_OPERATION_COUNT.labels(operation=operation, scheme=self.scheme, outcome=outcome).inc()

    def _observe(self, operation: str, fn, value):
        try:
            result = fn(value)
        except AuthenticationFailedError as exc:
            self._record(operation, exc.code)
            logger.warning(
                "codec.authentication_failed",
                scheme=self.scheme,
                operation=operation,
                code=exc.code,
                envelope_length=len(value) if isinstance(value, str) else None,
            )
            raise
        except SecureCodecError as exc:
            self._record(operation, exc.code)
            logger.info(f"codec.{operation}_rejected", scheme=self.scheme, code=exc.code)
            raise
        self._record(operation, "ok")
        return result

    def encrypt(self, plaintext: str) -> str:
        return self._observe("encrypt", self.codec.encrypt, plaintext)

    def decrypt(self, envelope: str) -> str:
        return self._observe("decrypt", self.codec.decrypt, envelope)

    def decrypt_versioned(self, envelope: str):
        return self._observe("decrypt", self.codec.decrypt_versioned, envelope)

    def reencrypt(self, envelope: str) -> str:
        return self._observe("reencrypt", self.codec.reencrypt, envelope)
