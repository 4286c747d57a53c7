"""Process configuration loaded from the environment.

`.env` loading is opt-in via APP_LOAD_DOTENV so tests and containers keep
full control over the environment. Existing variables always win.
"""
from __future__ import annotations
import base64
import binascii
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError, InvalidKeyError

TRUTHY = {"1", "true", "TRUE", "yes", "on"}

SCHEME_CBC_HMAC = "cbc-hmac"
SCHEME_AES_GCM = "aes-gcm"
SCHEMES = (SCHEME_CBC_HMAC, SCHEME_AES_GCM)

BASE64_KEY_PREFIX = "base64:"


def decode_key(value: Optional[str]) -> bytes:
    """Turn the at-rest key representation into raw key bytes.

    Accepted forms:
      * ``base64:<standard base64>``: the decoded bytes are the key
      * anything else: the UTF-8 bytes of the string are the key (this is what
        the PHP counterpart does with ENCRYPTION_KEY)

    Length is not checked here; the codec validates it on construction.
    """
    if not value:
        raise InvalidKeyError("encryption key is empty or not set")
    if value.startswith(BASE64_KEY_PREFIX):
        try:
            return base64.b64decode(value[len(BASE64_KEY_PREFIX):], validate=True)
        except (binascii.Error, ValueError):
            raise InvalidKeyError("encryption key is not valid base64") from None
    return value.encode("utf-8")


@dataclass(frozen=True)
class SecureConfig:
    key: str = field(repr=False)
    scheme: str = SCHEME_CBC_HMAC
    legacy_key: Optional[str] = field(default=None, repr=False)
    legacy_scheme: str = SCHEME_AES_GCM

    @property
    def has_legacy(self) -> bool:
        return bool(self.legacy_key)


@dataclass(frozen=True)
class LogConfig:
    level: str = "info"
    format: str = "json"


@dataclass(frozen=True)
class Settings:
    secure: SecureConfig
    log: LogConfig = field(default_factory=LogConfig)
    app_name: str = "flex-secure"
    env: str = "development"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            if os.getenv("APP_LOAD_DOTENV") in TRUTHY:
                # search from the working directory, not this module's location
                load_dotenv(find_dotenv(usecwd=True), override=False)
            environ = os.environ

        def get(name: str, default: str = "") -> str:
            return (environ.get(name) or default).strip()

        scheme = get("ENCRYPTION_SCHEME", SCHEME_CBC_HMAC).lower()
        legacy_scheme = get("ENCRYPTION_LEGACY_SCHEME", SCHEME_AES_GCM).lower()
        for name, value in (("ENCRYPTION_SCHEME", scheme), ("ENCRYPTION_LEGACY_SCHEME", legacy_scheme)):
            if value not in SCHEMES:
                raise ConfigError(f"{name} must be one of {', '.join(SCHEMES)}")

        log_format = get("LOG_FORMAT", "json").lower()
        if log_format not in {"json", "console"}:
            log_format = "console"

        return cls(
            secure=SecureConfig(
                key=environ.get("ENCRYPTION_KEY") or "",
                scheme=scheme,
                legacy_key=environ.get("ENCRYPTION_LEGACY_KEY") or None,
                legacy_scheme=legacy_scheme,
            ),
            log=LogConfig(level=get("LOG_LEVEL", "info").lower(), format=log_format),
            app_name=get("APP_NAME", "flex-secure"),
            env=get("APP_ENV", "development"),
        )
