import os
import secrets
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from app.api.analysis.routes import router as analysis_router
from app.api.auth.routes import router as auth_router
from app.api.auth.schemas import INTERNAL_ERROR_MESSAGE, NOT_LOGGED_IN_MESSAGE
from app.api.health import router as health_router
from app.config import LOG_LEVEL, PUBLIC_DIR, SESSION_HTTPS_ONLY, SESSION_SECRET_KEY
from app.core import configure_logging, log_error, log_info, log_warning
from app.spotify import SessionError, SpotifyApiError, Unauthenticated


def _session_secret(secret_key: Optional[str]) -> str:
    if secret_key:
        return secret_key
    log_warning(
        "SESSION_SECRET_KEY is not set; using a random key. "
        "Sessions will not survive a restart."
    )
    return secrets.token_hex(32)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthenticated)
    async def _unauthenticated(request: Request, exc: Unauthenticated):
        return PlainTextResponse(NOT_LOGGED_IN_MESSAGE, status_code=401)

    @app.exception_handler(SessionError)
    async def _session_error(request: Request, exc: SessionError):
        log_error(f"Session error on {request.url.path}: {exc}")
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)

    @app.exception_handler(SpotifyApiError)
    async def _spotify_api_error(request: Request, exc: SpotifyApiError):
        log_error(f"Spotify API error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=502,
            content={
                "status": "upstream_error",
                "message": str(exc),
                "upstream_status": exc.status_code,
            },
        )


def create_app(
    secret_key: Optional[str] = None,
    public_dir: Optional[str] = PUBLIC_DIR,
) -> FastAPI:
    configure_logging(LOG_LEVEL)

    app = FastAPI(
        title="Spotify Library Analysis API",
        version="0.1.0",
        description="Saved tracks joined with artist genres and audio features.",
    )

    # Browser-session cookie (no max_age), signed with the secret key.
    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(secret_key or SESSION_SECRET_KEY),
        max_age=None,
        https_only=SESSION_HTTPS_ONLY,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        log_info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms)"
        )
        return response

    _register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router, tags=["auth"])
    app.include_router(analysis_router, tags=["analysis"])

    # Static front-end, mounted last so API routes take precedence.
    if public_dir and os.path.isdir(public_dir):
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")

    return app


app = create_app()
