"""Per-process dependency wiring.

One codec graph is built from Settings at startup and stored on the FastAPI
app state; consumers receive it through ``Depends(get_codec)`` instead of a
module-level singleton.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Type

import structlog
from fastapi import Request

from .config import SCHEME_AES_GCM, SCHEME_CBC_HMAC, SecureConfig, Settings, decode_key
from .errors import ConfigError, SecureCodecError
from .services.codec_fallback import FallbackCodec
from .services.codec_metrics import InstrumentedCodec
from .services.gcm_codec import GcmCodec
from .services.secure_codec import Codec, SecureCodec

logger = structlog.get_logger(__name__)

CODECS: Dict[str, Type] = {
    SCHEME_CBC_HMAC: SecureCodec,
    SCHEME_AES_GCM: GcmCodec,
}


def create_codec(scheme: str, key_value: str) -> Codec:
    try:
        codec_cls = CODECS[scheme]
    except KeyError:
        raise ConfigError(f"unsupported encryption scheme: {scheme}") from None
    return codec_cls(decode_key(key_value))


def create_secure(cfg: SecureConfig) -> InstrumentedCodec:
    try:
        primary = create_codec(cfg.scheme, cfg.key)
        legacy = create_codec(cfg.legacy_scheme, cfg.legacy_key) if cfg.has_legacy else None
    except SecureCodecError as exc:
        logger.error("container.secure_failed", code=exc.code, reason=exc.message)
        raise
    logger.info("container.secure_created", scheme=cfg.scheme, legacy=cfg.legacy_scheme if legacy else None)
    return InstrumentedCodec(FallbackCodec(primary, legacy))


@dataclass(frozen=True)
class Container:
    settings: Settings
    codec: InstrumentedCodec

    @property
    def has_legacy(self) -> bool:
        return self.codec.legacy is not None


def build_container(settings: Settings) -> Container:
    return Container(settings=settings, codec=create_secure(settings.secure))


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_codec(request: Request) -> Codec:
    return get_container(request).codec
