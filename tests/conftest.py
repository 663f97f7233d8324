"""Fixtures: a temporary database, an in-memory object store and a test client."""

import asyncio
import io

import pytest
from config import Settings
from database import init_db
from fastapi.testclient import TestClient
from main import create_app
from models import UploadResult
from object_store import ObjectStoreError
from store import HistoryStore, PlaylistStore, SongStore

ADMIN_PASSWORD = "letmein"
JWT_SECRET = "test-jwt-secret-0123456789abcdef0123"


class FakeObjectStore:
    """Stands in for Cloudinary. Records every call; failures are opt-in per resource type or id."""

    def __init__(self):
        self.uploads: list[tuple[str, str, bytes]] = []
        self.destroyed: list[tuple[str, str]] = []
        self.fail_upload: set[str] = set()
        self.fail_destroy: set[str] = set()
        self.upload_delay: dict[str, float] = {}
        self.in_flight = 0
        self.peak_in_flight = 0
        self.completed: list[str] = []

    async def upload(self, data: bytes, folder: str, resource_type: str) -> UploadResult:
        self.uploads.append((folder, resource_type, data))
        public_id = f"{folder}/asset{len(self.uploads)}"
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.upload_delay.get(resource_type, 0))
            if resource_type in self.fail_upload:
                raise ObjectStoreError(f"{resource_type} upload refused")
        finally:
            self.in_flight -= 1
        self.completed.append(public_id)
        return UploadResult(
            secure_url=f"https://res.example.test/{resource_type}/upload/{public_id}",
            public_id=public_id,
        )

    async def destroy(self, public_id: str, resource_type: str) -> None:
        self.destroyed.append((public_id, resource_type))
        if public_id in self.fail_destroy:
            raise ObjectStoreError(f"destroy {public_id} refused")


@pytest.fixture()
def db_path(tmp_path):
    path = str(tmp_path / "music.db")
    init_db(path)
    return path


@pytest.fixture()
def songs(db_path):
    return SongStore(db_path)


@pytest.fixture()
def playlists(db_path):
    return PlaylistStore(db_path)


@pytest.fixture()
def history(db_path):
    return HistoryStore(db_path)


@pytest.fixture()
def object_store():
    return FakeObjectStore()


@pytest.fixture()
def settings(db_path):
    return Settings(
        db_path=db_path,
        admin_password=ADMIN_PASSWORD,
        jwt_secret=JWT_SECRET,
        max_upload_mb=1,
    )


@pytest.fixture()
def client(settings, object_store):
    app = create_app(settings, object_store=object_store)
    with TestClient(app) as c:
        yield c


def upload_files(audio: bytes | None = b"ID3\x03\x00\x00AUDIO", image: bytes | None = b"\x89PNG\r\n\x1a\nIMG"):
    """Multipart `files` mapping for POST /api/songs/upload."""
    files = {}
    if audio is not None:
        files["audioFile"] = ("track.mp3", io.BytesIO(audio), "audio/mpeg")
    if image is not None:
        files["coverImage"] = ("cover.png", io.BytesIO(image), "image/png")
    return files


def insert_song(songs: SongStore, title: str = "Song", artist: str = "Artist", n: int = 1):
    return songs.insert(
        title=title,
        artist=artist,
        audio_url=f"https://res.example.test/video/upload/songs/a{n}",
        image_url=f"https://res.example.test/image/upload/covers/i{n}",
        audio_public_id=f"songs/a{n}",
        image_public_id=f"covers/i{n}",
    )
