"""Saved-tracks analysis: a three-way join over the user's library.

One page of saved tracks is joined with:

  - artist details (genres), keyed by artist uri
  - audio features, keyed by track id

Lookups in both joins are total: an artist that cannot be resolved contributes
no genres, and a track without an id or without audio features is dropped from
the output. Only a failing remote call aborts the analysis (SpotifyApiError
propagates to the caller). The output keeps the page order and always echoes
the page's limit, offset and total.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

from app.core import (
    Artist,
    AudioFeatures,
    SavedTrack,
    TrackAnalysis,
    UserAnalysis,
    log_info,
    log_step,
)
from app.spotify import MusicLibrary


def _distinct_artist_ids(items: List[SavedTrack]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        for artist in item.track.artists:
            if artist.id:
                seen.setdefault(artist.id, None)
    return list(seen)


def _distinct_track_ids(items: List[SavedTrack]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        if item.track.id:
            seen.setdefault(item.track.id, None)
    return list(seen)


def _genres_by_artist_uri(artists: List[Artist]) -> Dict[str, List[str]]:
    return {a.uri: a.genres for a in artists if a.uri}


def _genres_for_track(
    item: SavedTrack, genres_by_uri: Dict[str, List[str]]
) -> List[str]:
    genres: List[str] = []
    for artist in item.track.artists:
        if artist.uri:
            genres.extend(genres_by_uri.get(artist.uri, []))
    return genres


def _fetch_artists(client: MusicLibrary, artist_ids: List[str]) -> List[Artist]:
    if not artist_ids:
        return []
    return client.get_artists(artist_ids)


def _fetch_audio_features(
    client: MusicLibrary, track_ids: List[str]
) -> List[AudioFeatures]:
    if not track_ids:
        return []
    return client.get_audio_features(track_ids)


def fetch_user_analysis(
    client: MusicLibrary,
    limit: int,
    offset: int,
    max_workers: int = 2,
) -> UserAnalysis:
    """
    Build a UserAnalysis for one page of the user's saved tracks.

    The artist and audio-features lookups only depend on the tracks page and
    run concurrently on up to `max_workers` threads.
    """
    page = client.get_saved_tracks(limit, offset)
    items = page.items

    artist_ids = _distinct_artist_ids(items)
    track_ids = _distinct_track_ids(items)
    log_step(
        f"Resolving {len(artist_ids)} artists and {len(track_ids)} audio features..."
    )

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        artists_future = executor.submit(_fetch_artists, client, artist_ids)
        features_future = executor.submit(_fetch_audio_features, client, track_ids)
        artists = artists_future.result()
        audio_features = features_future.result()

    genres_by_uri = _genres_by_artist_uri(artists)
    features_by_id = {f.id: f for f in audio_features}

    tracks: List[TrackAnalysis] = []
    for item in items:
        track_id = item.track.id
        if not track_id:
            continue
        features = features_by_id.get(track_id)
        if features is None:
            continue
        tracks.append(
            TrackAnalysis(
                saved_track=item,
                genres=_genres_for_track(item, genres_by_uri),
                audio_features=features,
            )
        )

    dropped = len(items) - len(tracks)
    log_info(
        f"Analysis: {len(tracks)} tracks joined, {dropped} dropped "
        f"(page {page.offset}+{page.limit} of {page.total})."
    )

    return UserAnalysis(
        tracks=tracks,
        limit=page.limit,
        offset=page.offset,
        total=page.total,
    )
