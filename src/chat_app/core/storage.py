from abc import ABC, abstractmethod
import asyncio
import logging

import cloudinary
import cloudinary.uploader

from chat_app.config import CloudinaryConfig


class AssetStorageError(Exception):
    """Raised when an asset could not be stored."""


class AssetStorage(ABC):
    @abstractmethod
    async def upload(
            self,
            payload: str
    ) -> str:
        """
        Stores an inline-encoded asset (data URI) and returns its durable URL.
        :param payload:
        :return:
        :raises AssetStorageError:
        """
        raise NotImplementedError()


class CloudinaryAssetStorage(AssetStorage):
    def __init__(self, config: CloudinaryConfig, logger: logging.Logger | None = None):
        self.folder = config.folder
        self.logger = logger or logging.getLogger(__name__)
        cloudinary.config(
            cloud_name=config.cloud_name,
            api_key=config.api_key,
            api_secret=config.api_secret,
            secure=True
        )

    async def upload(self, payload: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._upload, payload)

    def _upload(self, payload: str) -> str:
        try:
            result = cloudinary.uploader.upload(payload, folder=self.folder)
        except Exception as e:
            self.logger.error("Error uploading asset to cloudinary: %s", str(e), exc_info=True)
            raise AssetStorageError("Asset upload failed") from e

        url = result.get("secure_url")
        if not url:
            self.logger.error("Cloudinary response has no secure_url: %s", result)
            raise AssetStorageError("Asset upload returned no URL")
        return url
