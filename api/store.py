import logging
import uuid
from datetime import datetime, timezone

from database import db
from models import HistoryEntry, Playlist, Song

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_valid_id(value: str | None) -> bool:
    """True if value is a well-formed record identifier (a UUID string)."""
    if not value:
        return False
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


def _song_from_row(row) -> Song:
    return Song(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        audio_url=row["audio_url"],
        image_url=row["image_url"],
        audio_public_id=row["audio_public_id"],
        image_public_id=row["image_public_id"],
        created_at=row["created_at"],
    )


class SongStore:
    """Song records in the metadata database."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(
        self,
        title: str,
        artist: str,
        audio_url: str,
        image_url: str,
        audio_public_id: str | None = None,
        image_public_id: str | None = None,
    ) -> Song:
        song = Song(
            id=str(uuid.uuid4()),
            title=title,
            artist=artist,
            audio_url=audio_url,
            image_url=image_url,
            audio_public_id=audio_public_id,
            image_public_id=image_public_id,
            created_at=_now(),
        )
        with db(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO songs (id, title, artist, audio_url, image_url,
                                   audio_public_id, image_public_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    song.id,
                    song.title,
                    song.artist,
                    song.audio_url,
                    song.image_url,
                    song.audio_public_id,
                    song.image_public_id,
                    song.created_at,
                ),
            )
        return song

    def find_by_id(self, song_id: str) -> Song | None:
        with db(self.db_path) as conn:
            row = conn.execute("SELECT * FROM songs WHERE id=?", (song_id,)).fetchone()
        return _song_from_row(row) if row else None

    def update_by_id(self, song_id: str, title: str | None = None, artist: str | None = None) -> Song | None:
        """Change title and/or artist. Fields left as None keep their value."""
        with db(self.db_path) as conn:
            row = conn.execute("SELECT * FROM songs WHERE id=?", (song_id,)).fetchone()
            if not row:
                return None
            conn.execute(
                "UPDATE songs SET title=?, artist=? WHERE id=?",
                (
                    title if title is not None else row["title"],
                    artist if artist is not None else row["artist"],
                    song_id,
                ),
            )
            row = conn.execute("SELECT * FROM songs WHERE id=?", (song_id,)).fetchone()
        return _song_from_row(row)

    def delete_by_id(self, song_id: str) -> bool:
        with db(self.db_path) as conn:
            conn.execute("DELETE FROM history WHERE song_id=?", (song_id,))
            conn.execute("DELETE FROM playlist_songs WHERE song_id=?", (song_id,))
            deleted = conn.execute("DELETE FROM songs WHERE id=?", (song_id,)).rowcount
        return deleted > 0

    def list_all(self) -> list[Song]:
        with db(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM songs ORDER BY created_at DESC, rowid DESC").fetchall()
        return [_song_from_row(r) for r in rows]

    def list_recent(self, limit: int = 10) -> list[Song]:
        with db(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM songs ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_song_from_row(r) for r in rows]


class PlaylistStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def create(self, name: str, song_ids: list[str], created_by: str | None = None) -> Playlist:
        playlist = Playlist(
            id=str(uuid.uuid4()),
            name=name,
            created_by=created_by,
            created_at=_now(),
            songs=list(song_ids),
        )
        with db(self.db_path) as conn:
            conn.execute(
                "INSERT INTO playlists (id, name, created_by, created_at) VALUES (?, ?, ?, ?)",
                (playlist.id, playlist.name, playlist.created_by, playlist.created_at),
            )
            conn.executemany(
                "INSERT INTO playlist_songs (playlist_id, song_id, position) VALUES (?, ?, ?)",
                [(playlist.id, song_id, pos) for pos, song_id in enumerate(playlist.songs)],
            )
        logger.info(f"Created playlist {playlist.id} with {len(playlist.songs)} song(s)")
        return playlist

    def _song_ids(self, conn, playlist_id: str) -> list[str]:
        rows = conn.execute(
            "SELECT song_id FROM playlist_songs WHERE playlist_id=? ORDER BY position",
            (playlist_id,),
        ).fetchall()
        return [r["song_id"] for r in rows]

    def find_by_id(self, playlist_id: str) -> Playlist | None:
        with db(self.db_path) as conn:
            row = conn.execute("SELECT * FROM playlists WHERE id=?", (playlist_id,)).fetchone()
            if not row:
                return None
            song_ids = self._song_ids(conn, playlist_id)
        return Playlist(
            id=row["id"],
            name=row["name"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            songs=song_ids,
        )

    def list_all(self) -> list[Playlist]:
        with db(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM playlists ORDER BY created_at, rowid").fetchall()
            return [
                Playlist(
                    id=row["id"],
                    name=row["name"],
                    created_by=row["created_by"],
                    created_at=row["created_at"],
                    songs=self._song_ids(conn, row["id"]),
                )
                for row in rows
            ]

    def songs_for(self, playlist_id: str) -> list[Song] | None:
        """Songs of a playlist in playlist order. Ids with no song record are skipped."""
        with db(self.db_path) as conn:
            exists = conn.execute("SELECT 1 FROM playlists WHERE id=?", (playlist_id,)).fetchone()
            if not exists:
                return None
            rows = conn.execute(
                """
                SELECT s.* FROM playlist_songs ps
                JOIN songs s ON s.id = ps.song_id
                WHERE ps.playlist_id = ?
                ORDER BY ps.position
                """,
                (playlist_id,),
            ).fetchall()
        return [_song_from_row(r) for r in rows]


class HistoryStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def add(self, user_id: str, song_id: str) -> HistoryEntry:
        played_at = _now()
        with db(self.db_path) as conn:
            cur = conn.execute(
                "INSERT INTO history (user_id, song_id, played_at) VALUES (?, ?, ?)",
                (user_id, song_id, played_at),
            )
            entry_id = cur.lastrowid
        return HistoryEntry(id=entry_id, user_id=user_id, song_id=song_id, played_at=played_at)

    def for_user(self, user_id: str) -> list[HistoryEntry]:
        with db(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM history WHERE user_id=? ORDER BY played_at DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [
            HistoryEntry(id=r["id"], user_id=r["user_id"], song_id=r["song_id"], played_at=r["played_at"])
            for r in rows
        ]
