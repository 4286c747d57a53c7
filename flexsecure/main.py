"""FastAPI host for the codec.

Responsibilities kept minimal:
  * Lifespan: load Settings, configure logging, build the codec container
    (an invalid key stops startup)
  * Health endpoint with a codec self check
  * Cross-cutting concerns: metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .config import Settings
from .container import build_container, get_container
from .errors import BaseAppException, InternalServerError, SecureCodecError
from .logging_setup import configure_logging

logger = structlog.get_logger(__name__)

SELF_CHECK_VALUE = "flex-secure self check"

# --- Metrics setup ---
REQUEST_COUNT = Counter(
    "flexsecure_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "flexsecure_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or Settings.from_env()
        configure_logging(resolved.log)
        app.state.container = build_container(resolved)
        logger.info("app.started", app=resolved.app_name, env=resolved.env)
        yield

    app = FastAPI(title="Flex Secure", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        path = request.url.path
        method = request.method
        with REQUEST_LATENCY.labels(method=method, path=path).time():
            response: Response = await call_next(request)
        REQUEST_COUNT.labels(method=method, path=path, status=str(response.status_code)).inc()
        return response

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        return JSONResponse(
            status_code=exc.http_status,
            content={"detail": {"code": exc.code, "message": exc.message}},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("app.unhandled_exception", error_type=type(exc).__name__)
        return await app_exception_handler(request, InternalServerError("unexpected error"))

    @app.get("/healthz")
    async def health(request: Request):
        container = get_container(request)
        primary = container.codec.primary
        try:
            ok = primary.decrypt(primary.encrypt(SELF_CHECK_VALUE)) == SELF_CHECK_VALUE
        except SecureCodecError as exc:
            logger.error("health.codec_self_check_failed", code=exc.code)
            ok = False
        return {
            "status": "ok" if ok else "degraded",
            "codec": {
                "scheme": container.codec.scheme,
                "selfCheck": "ok" if ok else "failed",
                "legacy": container.has_legacy,
            },
        }

    return app


app = create_app()
