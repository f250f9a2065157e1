from typing import List, Optional

from pydantic import BaseModel


class ArtistRefSchema(BaseModel):
    name: str
    id: Optional[str] = None
    uri: Optional[str] = None


class TrackSchema(BaseModel):
    uri: str
    name: str
    id: Optional[str] = None
    artists: List[ArtistRefSchema]


class SavedTrackSchema(BaseModel):
    added_at: str
    track: TrackSchema


class AudioFeaturesSchema(BaseModel):
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


class TrackAnalysisSchema(BaseModel):
    saved_track: SavedTrackSchema
    genres: List[str]
    audio_features: AudioFeaturesSchema


class UserAnalysisResponse(BaseModel):
    tracks: List[TrackAnalysisSchema]
    limit: int
    offset: int
    total: int
