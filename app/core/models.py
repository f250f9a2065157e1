from dataclasses import asdict, dataclass, field
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


@dataclass
class ArtistRef:
    """
    Simplified artist as embedded in a track object.

    Some provider-internal artists (local files, podcasts) come without
    an id or uri.
    """

    name: str
    id: Optional[str] = None
    uri: Optional[str] = None

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "ArtistRef":
        return cls(
            name=payload["name"],
            id=payload.get("id"),
            uri=payload.get("uri"),
        )


@dataclass
class Track:
    uri: str
    name: str
    id: Optional[str] = None
    artists: List[ArtistRef] = field(default_factory=list)

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "Track":
        return cls(
            uri=payload["uri"],
            name=payload["name"],
            id=payload.get("id"),
            artists=[ArtistRef.from_spotify(a) for a in payload.get("artists") or []],
        )


@dataclass
class SavedTrack:
    added_at: str
    track: Track

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "SavedTrack":
        return cls(
            added_at=payload["added_at"],
            track=Track.from_spotify(payload["track"]),
        )


@dataclass
class SavedTracksPage:
    """One page of the user's library, as reported by the provider."""

    items: List[SavedTrack]
    limit: int
    offset: int
    total: int

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "SavedTracksPage":
        # Unavailable content comes back as an item with a null track.
        return cls(
            items=[
                SavedTrack.from_spotify(i)
                for i in payload.get("items") or []
                if i is not None and i.get("track") is not None
            ],
            limit=int(payload["limit"]),
            offset=int(payload["offset"]),
            total=int(payload["total"]),
        )


@dataclass
class Artist:
    id: str
    uri: Optional[str]
    name: str
    genres: List[str] = field(default_factory=list)

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "Artist":
        return cls(
            id=payload["id"],
            uri=payload.get("uri"),
            name=payload.get("name", ""),
            genres=list(payload.get("genres") or []),
        )


AUDIO_FEATURE_FIELDS = (
    "danceability",
    "energy",
    "key",
    "loudness",
    "mode",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
    "duration_ms",
    "time_signature",
)


@dataclass
class AudioFeatures:
    id: str
    danceability: Optional[float] = None
    energy: Optional[float] = None
    key: Optional[int] = None
    loudness: Optional[float] = None
    mode: Optional[int] = None
    speechiness: Optional[float] = None
    acousticness: Optional[float] = None
    instrumentalness: Optional[float] = None
    liveness: Optional[float] = None
    valence: Optional[float] = None
    tempo: Optional[float] = None
    duration_ms: Optional[int] = None
    time_signature: Optional[int] = None

    @classmethod
    def from_spotify(cls, payload: Dict[str, Any]) -> "AudioFeatures":
        values = {name: payload.get(name) for name in AUDIO_FEATURE_FIELDS}
        return cls(id=payload["id"], **values)


@dataclass
class TrackAnalysis:
    """
    A saved track joined with its artists' genres and its audio features.

    - genres : concatenation of every resolved artist's genres (duplicates kept)
    """

    saved_track: SavedTrack
    genres: List[str]
    audio_features: AudioFeatures


@dataclass
class UserAnalysis:
    tracks: List[TrackAnalysis]
    limit: int
    offset: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TokenInfo(BaseModel):
    """
    Credential material returned by the token exchange.

    - expires_at : epoch seconds, computed from expires_in when missing
    - scope      : space separated scopes actually granted
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600
    expires_at: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    def model_post_init(self, __context: Any) -> None:
        if self.expires_at is None:
            self.expires_at = int(time.time()) + self.expires_in

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= int(time.time())
