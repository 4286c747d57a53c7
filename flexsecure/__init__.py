"""Authenticated encryption of sensitive string values."""

from .errors import (
    AuthenticationFailedError,
    DecryptionFailedError,
    EmptyInputError,
    InvalidKeyError,
    MalformedInputError,
    SecureCodecError,
)
from .services.codec_fallback import DecryptResult, FallbackCodec
from .services.gcm_codec import GcmCodec
from .services.secure_codec import Codec, SecureCodec

__all__ = [
    "Codec",
    "SecureCodec",
    "GcmCodec",
    "FallbackCodec",
    "DecryptResult",
    "SecureCodecError",
    "InvalidKeyError",
    "EmptyInputError",
    "MalformedInputError",
    "AuthenticationFailedError",
    "DecryptionFailedError",
]

__version__ = "0.1.0"
