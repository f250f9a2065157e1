from fastapi import APIRouter, Depends

from app.api.dependencies import get_music_library
from app.config import ANALYSIS_LIMIT, ANALYSIS_OFFSET
from app.core import log_step
from app.pipeline import fetch_user_analysis
from app.spotify import MusicLibrary

from .schemas import UserAnalysisResponse

router = APIRouter()


@router.get("/analysis", response_model=UserAnalysisResponse)
def get_analysis(
    client: MusicLibrary = Depends(get_music_library),
) -> UserAnalysisResponse:
    """
    Saved tracks of the logged-in user, joined with genres and audio features.

    Requires a Spotify token in the session (401 otherwise); Spotify failures
    abort the request (502).
    """
    log_step("Building saved tracks analysis...")
    analysis = fetch_user_analysis(client, ANALYSIS_LIMIT, ANALYSIS_OFFSET)
    return UserAnalysisResponse.model_validate(analysis.to_dict())
