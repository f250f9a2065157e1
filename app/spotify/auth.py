"""Spotify authorization-code flow bound to the caller's session.

The browser session moves through three states:

  Anonymous --begin_authorization--> PendingCallback --complete--> Authenticated

The issued CSRF state lives in the session until the first callback reads it,
and the token obtained from the callback is stored under a fixed session key.
The session itself is any mutable mapping (Starlette's request.session in the
HTTP layer, a plain dict in tests).
"""

import secrets
from typing import Callable, MutableMapping, Optional
from urllib.parse import urlencode

import requests
from pydantic import ValidationError

from app.config import (
    SCOPES,
    SESSION_STATE_KEY,
    SESSION_TOKEN_KEY,
    SPOTIFY_AUTH_URL,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
    SPOTIFY_REDIRECT_URI,
    SPOTIFY_REQUEST_TIMEOUT,
    SPOTIFY_TOKEN_URL,
)
from app.core import TokenInfo, log_debug, log_step, log_success, log_warning

from .errors import (
    InvalidCode,
    MissingCode,
    ProviderDenied,
    SessionError,
    StateMismatch,
)

Session = MutableMapping[str, object]
TokenExchange = Callable[[str], Optional[TokenInfo]]

STATE_BYTES = 16


def generate_state() -> str:
    """Return a fresh URL-safe CSRF state carrying STATE_BYTES of entropy."""
    return secrets.token_urlsafe(STATE_BYTES)


def build_spotify_auth_url(state: str) -> str:
    auth_query_parameters = {
        "response_type": "code",
        "client_id": SPOTIFY_CLIENT_ID or "",
        "redirect_uri": SPOTIFY_REDIRECT_URI,
        "scope": " ".join(SCOPES),
        "state": state,
    }
    return f"{SPOTIFY_AUTH_URL}?{urlencode(auth_query_parameters)}"


def exchange_code_for_token(code: str) -> Optional[TokenInfo]:
    """
    Exchange an authorization code for a TokenInfo.

    Returns None when Spotify rejects the code or the exchange cannot be
    completed; the reason is logged.
    """
    token_data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": SPOTIFY_REDIRECT_URI,
        "client_id": SPOTIFY_CLIENT_ID,
        "client_secret": SPOTIFY_CLIENT_SECRET,
    }

    try:
        r = requests.post(
            SPOTIFY_TOKEN_URL, data=token_data, timeout=SPOTIFY_REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        log_warning(f"Token exchange request failed: {e}")
        return None

    if not r.ok:
        log_warning(f"Token exchange rejected ({r.status_code}): {r.text[:200]}")
        return None

    try:
        return TokenInfo.model_validate(r.json())
    except (ValueError, ValidationError) as e:
        log_warning(f"Token exchange returned an unusable payload: {e}")
        return None


class AuthSessionManager:
    """
    Mediates the OAuth authorization-code flow for one browser session.

    `exchange` turns an authorization code into a TokenInfo (or None); it
    defaults to the Spotify token endpoint and is replaced in tests.
    """

    def __init__(self, exchange: Optional[TokenExchange] = None):
        self._exchange = exchange or exchange_code_for_token

    def begin_authorization(self, session: Session) -> str:
        state = generate_state()
        session[SESSION_STATE_KEY] = state
        log_step("Redirecting to Spotify authorization page...")
        return build_spotify_auth_url(state)

    def complete_authorization(
        self,
        session: Session,
        state: Optional[str],
        code: Optional[str] = None,
        error: Optional[str] = None,
    ) -> TokenInfo:
        # The issued state is single-use, whatever the outcome.
        issued_state = session.pop(SESSION_STATE_KEY, None)

        if error:
            raise ProviderDenied(error)

        if not code:
            raise MissingCode("Callback did not include an authorization code.")

        if not state or not issued_state or not secrets.compare_digest(
            str(state).encode("utf-8"), str(issued_state).encode("utf-8")
        ):
            raise StateMismatch("Callback state does not match the issued state.")

        token_info = self._exchange(code)
        if token_info is None:
            raise InvalidCode("Bad authorization code.")

        log_success("Spotify authorization complete.")
        log_debug(f"Granted scopes: {token_info.scope}")
        return token_info

    def store_token(self, session: Session, token_info: TokenInfo) -> None:
        try:
            session[SESSION_TOKEN_KEY] = token_info.model_dump(mode="json")
        except (TypeError, ValueError) as e:
            raise SessionError(f"Could not store token in session: {e}") from e

    def load_token(self, session: Session) -> Optional[TokenInfo]:
        payload = session.get(SESSION_TOKEN_KEY)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise SessionError("Stored token has an invalid structure.")
        try:
            return TokenInfo.model_validate(payload)
        except ValidationError as e:
            raise SessionError(f"Stored token is corrupted: {e}") from e


def spotify_headers(token_info: TokenInfo) -> dict:
    return {"Authorization": f"Bearer {token_info.access_token}"}
