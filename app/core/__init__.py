"""Public façade for the app.core package.

This module exposes logging helpers and the domain models shared by the
Spotify integration, the analysis pipeline and the HTTP layer. Callers should
import these cross-cutting concerns from this façade instead of the internal
submodules.
"""

from .logging_config import configure_logging
from .logging_utils import (
    log_debug,
    log_error,
    log_info,
    log_step,
    log_success,
    log_warning,
)
from .models import (
    Artist,
    ArtistRef,
    AudioFeatures,
    SavedTrack,
    SavedTracksPage,
    TokenInfo,
    Track,
    TrackAnalysis,
    UserAnalysis,
)

__all__ = [
    "configure_logging",
    "log_info",
    "log_step",
    "log_success",
    "log_warning",
    "log_error",
    "log_debug",
    "Artist",
    "ArtistRef",
    "AudioFeatures",
    "SavedTrack",
    "SavedTracksPage",
    "TokenInfo",
    "Track",
    "TrackAnalysis",
    "UserAnalysis",
]
