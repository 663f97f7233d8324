from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Song:
    id: str
    title: str
    artist: str
    audio_url: str
    image_url: str
    audio_public_id: Optional[str]
    image_public_id: Optional[str]
    created_at: str


@dataclass
class UploadResult:
    secure_url: str
    public_id: str


@dataclass
class Playlist:
    id: str
    name: str
    created_by: Optional[str]
    created_at: str
    songs: list[str] = field(default_factory=list)  # song ids in playlist order


@dataclass
class HistoryEntry:
    id: int
    user_id: str
    song_id: str
    played_at: str
