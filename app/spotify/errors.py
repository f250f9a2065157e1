from typing import Optional


class SpotifyAuthError(Exception):
    """Base class for failures of the authorization callback."""


class ProviderDenied(SpotifyAuthError):
    """The user or Spotify rejected the authorization request."""


class MissingCode(SpotifyAuthError):
    """The callback carried neither an error nor an authorization code."""


class InvalidCode(SpotifyAuthError):
    """The authorization code could not be exchanged for a token."""


class StateMismatch(SpotifyAuthError):
    """The callback state does not match the one issued for this session."""


class SessionError(Exception):
    """The session store could not be read or written."""


class Unauthenticated(Exception):
    """No Spotify token is stored in the caller's session."""


class SpotifyApiError(Exception):
    """A call to the Spotify Web API failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
