import logging
from dataclasses import asdict

from auth import bearer_token
from fastapi import APIRouter, Body, Depends, File, Form, Header, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from orchestrator import (
    DeletionOrchestrator,
    SongServiceError,
    UploadOrchestrator,
)
from pydantic import BaseModel
from store import SongStore, is_valid_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/songs")

READ_CHUNK = 65536
HOME_FEED_SIZE = 10


class SongUpdate(BaseModel):
    title: str | None = None
    artist: str | None = None


class DeleteRequest(BaseModel):
    password: str | None = None


def get_songs(request: Request) -> SongStore:
    return request.app.state.songs


def get_uploader(request: Request) -> UploadOrchestrator:
    return request.app.state.uploader


def get_deleter(request: Request) -> DeletionOrchestrator:
    return request.app.state.deleter


def _check_id(song_id: str):
    if not is_valid_id(song_id):
        raise HTTPException(400, "Invalid song id")


async def _read_upload(file: UploadFile | None, max_bytes: int) -> bytes | None:
    if file is None or not file.filename:
        return None
    data = bytearray()
    while chunk := await file.read(READ_CHUNK):
        data.extend(chunk)
        if len(data) > max_bytes:
            raise HTTPException(413, f"File too large: {file.filename} (max {max_bytes // (1024 * 1024)}MB)")
    return bytes(data)


@router.post("/upload", status_code=201)
async def upload_song(
    request: Request,
    audioFile: UploadFile = File(None),
    coverImage: UploadFile = File(None),
    title: str = Form(None),
    artist: str = Form(None),
    uploader: UploadOrchestrator = Depends(get_uploader),
):
    max_bytes = request.app.state.settings.max_upload_bytes
    audio = await _read_upload(audioFile, max_bytes)
    image = await _read_upload(coverImage, max_bytes)

    try:
        song = await uploader.upload(audio, image, title=title, artist=artist)
    except SongServiceError as e:
        if e.status_code == 400:
            raise HTTPException(400, "Audio file and cover image are required")
        raise HTTPException(500, "Upload failed")

    return JSONResponse(
        {"message": "Song uploaded successfully", "song": asdict(song)},
        status_code=201,
    )


@router.get("/")
def list_songs(songs: SongStore = Depends(get_songs)):
    """All songs, newest first."""
    return [asdict(s) for s in songs.list_all()]


@router.get("/home")
def home_feed(songs: SongStore = Depends(get_songs)):
    return [asdict(s) for s in songs.list_recent(HOME_FEED_SIZE)]


@router.get("/{song_id}")
def get_song(song_id: str, songs: SongStore = Depends(get_songs)):
    _check_id(song_id)
    song = songs.find_by_id(song_id)
    if not song:
        raise HTTPException(404, "Song not found")
    return asdict(song)


@router.put("/{song_id}")
def update_song(song_id: str, update: SongUpdate, songs: SongStore = Depends(get_songs)):
    _check_id(song_id)
    song = songs.update_by_id(song_id, title=update.title, artist=update.artist)
    if not song:
        raise HTTPException(404, "Song not found")
    logger.info(f"Updated song {song_id}")
    return {"message": "Song updated successfully", "song": asdict(song)}


@router.delete("/{song_id}")
async def delete_song(
    song_id: str,
    body: DeleteRequest | None = Body(None),
    authorization: str | None = Header(None),
    deleter: DeletionOrchestrator = Depends(get_deleter),
):
    """Delete a song and its remote assets. Requires the admin password or an admin token."""
    credential = body.password if body and body.password else bearer_token(authorization)
    try:
        await deleter.delete(song_id, credential)
    except SongServiceError as e:
        raise HTTPException(e.status_code, str(e))
    return {"message": "Song deleted successfully"}
