from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from app.api.dependencies import get_auth_manager
from app.core import log_warning
from app.spotify import (
    AuthSessionManager,
    InvalidCode,
    MissingCode,
    ProviderDenied,
    SessionError,
    StateMismatch,
)

from .schemas import (
    BAD_CODE_MESSAGE,
    FAILED_TO_AUTHORIZE_MESSAGE,
    INTERNAL_ERROR_MESSAGE,
)

router = APIRouter()


@router.get("/auth")
def begin_authorization(
    request: Request,
    auth: AuthSessionManager = Depends(get_auth_manager),
) -> RedirectResponse:
    """
    Issue a CSRF state and redirect the browser to Spotify's consent page.
    """
    auth_url = auth.begin_authorization(request.session)
    return RedirectResponse(auth_url, status_code=302)


@router.get("/spotify")
def auth_callback(
    request: Request,
    state: str | None = Query(default=None),
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
    auth: AuthSessionManager = Depends(get_auth_manager),
):
    """
    Spotify redirect target.

    Examples:
      - /spotify?state=...&code=...
      - /spotify?state=...&error=access_denied
    """
    try:
        token_info = auth.complete_authorization(
            request.session, state=state, code=code, error=error
        )
    except ProviderDenied as e:
        log_warning(f"Spotify auth error: {e}")
        return PlainTextResponse(FAILED_TO_AUTHORIZE_MESSAGE)
    except StateMismatch as e:
        log_warning(f"Rejected authorization callback: {e}")
        return PlainTextResponse(FAILED_TO_AUTHORIZE_MESSAGE)
    except (MissingCode, InvalidCode) as e:
        log_warning(f"Rejected authorization code: {e}")
        return PlainTextResponse(BAD_CODE_MESSAGE)

    try:
        auth.store_token(request.session, token_info)
    except SessionError as e:
        log_warning(f"Error setting session cookie: {e}")
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE)

    return RedirectResponse("/", status_code=302)
