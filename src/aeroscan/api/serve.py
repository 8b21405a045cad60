"""API server for ``aeroscan``.

Builds the FastAPI application (CORS, security headers, JSON error handling,
and every router under ``/api``) and runs it with uvicorn.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aeroscan.errors import AeroscanError

logger = logging.getLogger(__name__)

_LOCAL_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


async def _aeroscan_error_handler(request: Request, exc: AeroscanError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message, "code": "bad_request"})


def register_exception_handlers(app: FastAPI) -> None:
    """Render AeroscanError and request validation failures as JSON errors."""
    app.add_exception_handler(AeroscanError, _aeroscan_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)


async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    response.headers["Cache-Control"] = "no-store"
    if request.url.path.endswith("/oauth/callback"):
        # Hand-off page: one inline script and style block, nothing else.
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; script-src 'unsafe-inline'; style-src 'unsafe-inline'; "
            "frame-ancestors 'none'"
        )
    if request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


def create_api_app() -> FastAPI:
    """Build the FastAPI application."""
    from aeroscan import __version__
    from aeroscan.api.v1 import mount_routers
    from aeroscan.config import get_settings

    settings = get_settings()

    app = FastAPI(
        title="Aeroscan API",
        description="seats.aero partner API proxy with OAuth sign-in and saved trips.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_origin_regex=_LOCAL_ORIGIN_REGEX,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", settings.api_key_header],
    )
    app.middleware("http")(security_headers_middleware)
    register_exception_handlers(app)
    mount_routers(app)

    return app


def run_api_server(host: str = "127.0.0.1", port: int = 3001, dev: bool = False) -> None:
    """Start the API server."""
    import uvicorn

    from aeroscan.config import get_settings

    settings = get_settings()
    logger.info("Aeroscan API proxy running on http://%s:%d", host, port)
    if settings.oauth_enabled:
        logger.info("OAuth sign-in enabled (redirect %s)", settings.oauth_redirect_uri)
    else:
        logger.info("OAuth sign-in disabled, missing: %s", ", ".join(settings.oauth_missing))

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "aeroscan.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py", "*.html"],
            log_level="debug",
        )
    else:
        uvicorn.run(create_api_app(), host=host, port=port, log_config=None)
