import asyncio
import io
import logging
from typing import Protocol

import cloudinary.uploader

from models import UploadResult

logger = logging.getLogger(__name__)

AUDIO_RESOURCE_TYPE = "video"  # Cloudinary files audio under its video class
IMAGE_RESOURCE_TYPE = "image"


class ObjectStoreError(Exception):
    pass


class ObjectStoreClient(Protocol):
    async def upload(self, data: bytes, folder: str, resource_type: str) -> UploadResult: ...

    async def destroy(self, public_id: str, resource_type: str) -> None: ...


class CloudinaryObjectStore:
    """Uploads and deletes assets on Cloudinary.

    Credentials are passed with every call instead of through
    cloudinary.config(), so several stores can coexist in one process.
    The SDK is blocking; each call runs in a worker thread.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    def _upload(self, data: bytes, folder: str, resource_type: str) -> UploadResult:
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=folder,
                resource_type=resource_type,
                **self._credentials,
            )
        except Exception as e:
            raise ObjectStoreError(f"{resource_type} upload failed: {e}") from e
        secure_url = result.get("secure_url")
        public_id = result.get("public_id")
        if not secure_url or not public_id:
            raise ObjectStoreError(f"{resource_type} upload returned no url/public_id")
        logger.info(f"Uploaded {resource_type} to {folder}: {public_id}")
        return UploadResult(secure_url=secure_url, public_id=public_id)

    def _destroy(self, public_id: str, resource_type: str) -> None:
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type, **self._credentials)
        except Exception as e:
            raise ObjectStoreError(f"destroy {public_id} failed: {e}") from e
        if result.get("result") != "ok":
            raise ObjectStoreError(f"destroy {public_id} failed: {result.get('result')}")
        logger.info(f"Destroyed {resource_type} {public_id}")

    async def upload(self, data: bytes, folder: str, resource_type: str) -> UploadResult:
        return await asyncio.to_thread(self._upload, data, folder, resource_type)

    async def destroy(self, public_id: str, resource_type: str) -> None:
        await asyncio.to_thread(self._destroy, public_id, resource_type)
