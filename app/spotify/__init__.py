"""Public façade for the app.spotify package.

This module exposes the Spotify Web API integration: the session-bound
authorization flow, the MusicLibrary capability used by the analysis
pipeline, and the error types raised by both. Callers should import these
symbols from this façade instead of the internal auth, client, or errors
modules.
"""

from .auth import (
    AuthSessionManager,
    build_spotify_auth_url,
    exchange_code_for_token,
    generate_state,
    spotify_headers,
)
from .client import MusicLibrary, SpotifyMusicLibrary
from .errors import (
    InvalidCode,
    MissingCode,
    ProviderDenied,
    SessionError,
    SpotifyApiError,
    SpotifyAuthError,
    StateMismatch,
    Unauthenticated,
)

__all__ = [
    "AuthSessionManager",
    "build_spotify_auth_url",
    "exchange_code_for_token",
    "generate_state",
    "spotify_headers",
    "MusicLibrary",
    "SpotifyMusicLibrary",
    "SpotifyAuthError",
    "ProviderDenied",
    "MissingCode",
    "InvalidCode",
    "StateMismatch",
    "SessionError",
    "SpotifyApiError",
    "Unauthenticated",
]
