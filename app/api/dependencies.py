from fastapi import Depends, Request

from app.spotify import (
    AuthSessionManager,
    MusicLibrary,
    SpotifyMusicLibrary,
    Unauthenticated,
)


def get_auth_manager() -> AuthSessionManager:
    return AuthSessionManager()


def get_music_library(
    request: Request,
    auth: AuthSessionManager = Depends(get_auth_manager),
) -> MusicLibrary:
    """
    Build a Spotify client from the token stored in the caller's session.

    Raises Unauthenticated when the session holds no token.
    """
    token_info = auth.load_token(request.session)
    if token_info is None:
        raise Unauthenticated("Not logged in.")
    return SpotifyMusicLibrary(token_info)
