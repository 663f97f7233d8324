import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from store import PlaylistStore, is_valid_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/playlists")

MAX_NAME_LENGTH = 100


class PlaylistCreate(BaseModel):
    name: str
    songs: list[str] = []
    created_by: str | None = None


def get_playlists(request: Request) -> PlaylistStore:
    return request.app.state.playlists


@router.get("/")
def list_playlists(playlists: PlaylistStore = Depends(get_playlists)):
    return [asdict(p) for p in playlists.list_all()]


@router.post("/")
def create_playlist(req: PlaylistCreate, playlists: PlaylistStore = Depends(get_playlists)):
    name = req.name.strip()
    if not name:
        raise HTTPException(400, "Playlist name is required")
    bad = [s for s in req.songs if not is_valid_id(s)]
    if bad:
        raise HTTPException(400, f"Invalid song id: {bad[0]}")

    playlist = playlists.create(name[:MAX_NAME_LENGTH], req.songs, created_by=req.created_by)
    return JSONResponse(asdict(playlist), status_code=201)


@router.get("/{playlist_id}/songs")
def playlist_songs(playlist_id: str, playlists: PlaylistStore = Depends(get_playlists)):
    """Songs of a playlist, in playlist order."""
    if not is_valid_id(playlist_id):
        raise HTTPException(400, "Invalid playlist id")
    songs = playlists.songs_for(playlist_id)
    if songs is None:
        raise HTTPException(404, "Playlist not found")
    return [asdict(s) for s in songs]
