from abc import ABC, abstractmethod
import threading
from typing import Any, Callable, Dict, List, Sequence

import requests

from app.config import SPOTIFY_API_BASE, SPOTIFY_REQUEST_TIMEOUT
from app.core import Artist, AudioFeatures, SavedTracksPage, TokenInfo, log_step

from .auth import spotify_headers
from .errors import SpotifyApiError

# Spotify caps the number of ids accepted by its batch endpoints.
ARTISTS_BATCH_SIZE = 50
AUDIO_FEATURES_BATCH_SIZE = 100


class MusicLibrary(ABC):
    """
    Narrow view of a music provider used by the analysis pipeline.

    Implementations raise SpotifyApiError when a call fails outright; lookups
    for unknown ids simply return fewer records.
    """

    @abstractmethod
    def get_saved_tracks(self, limit: int, offset: int) -> SavedTracksPage:
        raise NotImplementedError

    @abstractmethod
    def get_artists(self, artist_ids: Sequence[str]) -> List[Artist]:
        raise NotImplementedError

    @abstractmethod
    def get_audio_features(self, track_ids: Sequence[str]) -> List[AudioFeatures]:
        raise NotImplementedError


def _chunks(values: Sequence[str], size: int) -> List[List[str]]:
    return [list(values[i : i + size]) for i in range(0, len(values), size)]


class SpotifyMusicLibrary(MusicLibrary):
    """MusicLibrary backed by the Spotify Web API for one user token."""

    def __init__(
        self,
        token_info: TokenInfo,
        http_factory: Callable[[], requests.Session] = requests.Session,
        timeout: float = SPOTIFY_REQUEST_TIMEOUT,
    ):
        self._headers = spotify_headers(token_info)
        self._http_factory = http_factory
        self._local = threading.local()
        self._timeout = timeout

    def _http(self) -> requests.Session:
        # requests.Session is not thread-safe; one per worker thread.
        http = getattr(self._local, "http", None)
        if http is None:
            http = self._http_factory()
            http.headers.update(self._headers)
            self._local.http = http
        return http

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{SPOTIFY_API_BASE}{path}"
        try:
            r = self._http().get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise SpotifyApiError(f"GET {path} failed: {e}") from e

        if not r.ok:
            raise SpotifyApiError(
                f"GET {path} returned {r.status_code}: {r.text[:200]}",
                status_code=r.status_code,
            )

        try:
            data = r.json()
        except ValueError as e:
            raise SpotifyApiError(f"GET {path} returned invalid JSON.") from e
        if not isinstance(data, dict):
            raise SpotifyApiError(f"GET {path} returned an unexpected payload.")
        return data

    def get_saved_tracks(self, limit: int, offset: int) -> SavedTracksPage:
        log_step(f"Fetching saved tracks (limit={limit}, offset={offset})...")
        data = self._get("/me/tracks", {"limit": limit, "offset": offset})
        try:
            return SavedTracksPage.from_spotify(data)
        except (KeyError, TypeError, ValueError) as e:
            raise SpotifyApiError(f"Malformed saved tracks page: {e!r}") from e

    def get_artists(self, artist_ids: Sequence[str]) -> List[Artist]:
        artists: List[Artist] = []
        for batch in _chunks(artist_ids, ARTISTS_BATCH_SIZE):
            data = self._get("/artists", {"ids": ",".join(batch)})
            try:
                artists.extend(
                    Artist.from_spotify(a) for a in data["artists"] if a is not None
                )
            except (KeyError, TypeError) as e:
                raise SpotifyApiError(f"Malformed artists payload: {e!r}") from e
        return artists

    def get_audio_features(self, track_ids: Sequence[str]) -> List[AudioFeatures]:
        features: List[AudioFeatures] = []
        for batch in _chunks(track_ids, AUDIO_FEATURES_BATCH_SIZE):
            data = self._get("/audio-features", {"ids": ",".join(batch)})
            try:
                # Unknown ids come back as null entries.
                features.extend(
                    AudioFeatures.from_spotify(f)
                    for f in data["audio_features"]
                    if f is not None
                )
            except (KeyError, TypeError) as e:
                raise SpotifyApiError(f"Malformed audio features payload: {e!r}") from e
        return features
