import asyncio
import logging
from typing import Callable

from models import Song, UploadResult
from object_store import AUDIO_RESOURCE_TYPE, IMAGE_RESOURCE_TYPE, ObjectStoreClient
from store import SongStore, is_valid_id

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"
DEFAULT_ARTIST = "Unknown"


class SongServiceError(Exception):
    status_code = 500


class MissingAssetError(SongServiceError):
    status_code = 400

    def __init__(self, asset: str):
        super().__init__(f"Audio file and cover image are required (missing {asset})")
        self.asset = asset


class InvalidSongIdError(SongServiceError):
    status_code = 400

    def __init__(self, song_id: str):
        super().__init__(f"Invalid song id: {song_id}")
        self.song_id = song_id


class UnauthorizedError(SongServiceError):
    status_code = 401


class SongNotFoundError(SongServiceError):
    status_code = 404

    def __init__(self, song_id: str):
        super().__init__("Song not found")
        self.song_id = song_id


class AssetUploadError(SongServiceError):
    def __init__(self, asset: str, cause: BaseException):
        super().__init__(f"{asset} upload failed: {cause}")
        self.asset = asset
        self.cause = cause


class PersistenceError(SongServiceError):
    pass


def _or_default(value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    return value.strip()


class UploadOrchestrator:
    """Uploads an audio file and its cover image, then records the song.

    Both uploads run concurrently. A song record is written only when both
    succeed, so a stored song always has both asset URLs.
    """

    def __init__(
        self,
        object_store: ObjectStoreClient,
        songs: SongStore,
        audio_folder: str = "songs",
        image_folder: str = "covers",
    ):
        self.object_store = object_store
        self.songs = songs
        self.audio_folder = audio_folder
        self.image_folder = image_folder

    async def _discard(self, result: UploadResult, resource_type: str):
        try:
            await self.object_store.destroy(result.public_id, resource_type)
            logger.info(f"Discarded orphaned {resource_type} asset {result.public_id}")
        except Exception as e:
            logger.error(f"Could not discard orphaned {resource_type} asset {result.public_id}: {e}")

    async def upload(
        self,
        audio: bytes | None,
        image: bytes | None,
        title: str | None = None,
        artist: str | None = None,
    ) -> Song:
        if not audio:
            raise MissingAssetError("audio")
        if not image:
            raise MissingAssetError("image")

        # Each branch runs as its own task so a failure in one does not cancel the other.
        audio_task = asyncio.create_task(
            self.object_store.upload(audio, self.audio_folder, AUDIO_RESOURCE_TYPE)
        )
        image_task = asyncio.create_task(
            self.object_store.upload(image, self.image_folder, IMAGE_RESOURCE_TYPE)
        )
        audio_result, image_result = await asyncio.gather(audio_task, image_task, return_exceptions=True)

        branches = [
            ("audio", AUDIO_RESOURCE_TYPE, audio_result),
            ("image", IMAGE_RESOURCE_TYPE, image_result),
        ]
        failures = [(asset, r) for asset, _, r in branches if isinstance(r, BaseException)]
        if failures:
            for asset, resource_type, result in branches:
                if not isinstance(result, BaseException):
                    await self._discard(result, resource_type)
            asset, error = failures[0]
            logger.error(f"Upload aborted, {asset} upload failed: {error}")
            raise AssetUploadError(asset, error)

        try:
            song = self.songs.insert(
                title=_or_default(title, DEFAULT_TITLE),
                artist=_or_default(artist, DEFAULT_ARTIST),
                audio_url=audio_result.secure_url,
                image_url=image_result.secure_url,
                audio_public_id=audio_result.public_id,
                image_public_id=image_result.public_id,
            )
        except Exception as e:
            logger.error(f"Saving song failed after upload, discarding assets: {e}", exc_info=True)
            await asyncio.gather(
                self._discard(audio_result, AUDIO_RESOURCE_TYPE),
                self._discard(image_result, IMAGE_RESOURCE_TYPE),
            )
            raise PersistenceError(f"Could not save song: {e}") from e

        logger.info(f"Song uploaded: id={song.id} title={song.title!r} artist={song.artist!r}")
        return song


class DeletionOrchestrator:
    """Removes a song record and, best effort, its two remote assets."""

    def __init__(
        self,
        object_store: ObjectStoreClient,
        songs: SongStore,
        is_authorized: Callable[[str | None], bool],
    ):
        self.object_store = object_store
        self.songs = songs
        self.is_authorized = is_authorized

    async def _destroy(self, public_id: str, resource_type: str):
        try:
            await self.object_store.destroy(public_id, resource_type)
        except Exception as e:
            logger.error(f"Failed to delete remote {resource_type} {public_id}: {e}")

    async def delete(self, song_id: str, credential: str | None) -> Song:
        if not is_valid_id(song_id):
            raise InvalidSongIdError(song_id)
        if not self.is_authorized(credential):
            logger.warning(f"Unauthorized delete attempt for song {song_id}")
            raise UnauthorizedError("Unauthorized! Incorrect admin password.")

        song = self.songs.find_by_id(song_id)
        if song is None:
            raise SongNotFoundError(song_id)

        cleanups = []
        if song.audio_public_id:
            cleanups.append(self._destroy(song.audio_public_id, AUDIO_RESOURCE_TYPE))
        if song.image_public_id:
            cleanups.append(self._destroy(song.image_public_id, IMAGE_RESOURCE_TYPE))
        await asyncio.gather(*cleanups)

        self.songs.delete_by_id(song_id)
        logger.info(f"Deleted song: {song_id}")
        return song
