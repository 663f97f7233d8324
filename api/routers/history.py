import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from store import HistoryStore, SongStore, is_valid_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/history")


class HistoryCreate(BaseModel):
    user_id: str
    song_id: str


def get_history(request: Request) -> HistoryStore:
    return request.app.state.history


def get_songs(request: Request) -> SongStore:
    return request.app.state.songs


@router.post("/")
def add_to_history(
    req: HistoryCreate,
    history: HistoryStore = Depends(get_history),
    songs: SongStore = Depends(get_songs),
):
    user_id = req.user_id.strip()
    if not user_id:
        raise HTTPException(400, "user_id is required")
    if not is_valid_id(req.song_id):
        raise HTTPException(400, "Invalid song id")
    if songs.find_by_id(req.song_id) is None:
        raise HTTPException(404, "Song not found")

    entry = history.add(user_id, req.song_id)
    return JSONResponse(asdict(entry), status_code=201)


@router.get("/{user_id}")
def user_history(user_id: str, history: HistoryStore = Depends(get_history)):
    """Songs a user played, most recent first."""
    return [asdict(e) for e in history.for_user(user_id)]
