"""
Asset hosts for category logos.

An asset host stores an uploaded image and hands back its public URL
together with the host's own identifier, which is what ``delete`` expects.

- LocalAssetHost: files under UPLOAD_DIR, served by the app itself
- CloudinaryAssetHost: the Cloudinary SDK, run in the threadpool since it blocks
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict
import io
import logging

import aiofiles.os
import cloudinary.exceptions
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from app.config.settings import Settings
from app.schemas import StoredAsset
from app.utils.exceptions import AssetHostError
from app.utils.file_utils import generate_unique_filename, save_bytes

logger = logging.getLogger(__name__)


class AssetHost(ABC):
    """Store/delete contract shared by all asset hosts."""

    kind: str = "abstract"

    @abstractmethod
    async def store(self, content: bytes, filename: str, content_type: str) -> StoredAsset:
        """Upload ``content`` and return where it lives."""

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove a previously stored asset."""

    async def close(self) -> None:
        """Release any held resources."""


class LocalAssetHost(AssetHost):
    """Keeps uploads on the local disk."""

    kind = "local"

    def __init__(self, upload_dir: Path, url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    async def store(self, content: bytes, filename: str, content_type: str) -> StoredAsset:
        name = generate_unique_filename(filename, prefix="category")
        try:
            await save_bytes(content, self.upload_dir, name)
        except OSError as e:
            raise AssetHostError(f"Failed to write {name}: {e}") from e

        logger.info(f"Stored asset {name} ({len(content)} bytes)", extra={"asset_id": name})
        return StoredAsset(url=f"{self.url_prefix}/{name}", public_id=name)

    async def delete(self, public_id: str) -> None:
        # public ids are bare file names; anything else would escape upload_dir
        if not public_id or Path(public_id).name != public_id:
            raise AssetHostError(f"Invalid asset id: {public_id!r}")

        path = self.upload_dir / public_id
        if not path.exists():
            logger.warning(f"Asset already gone: {public_id}", extra={"asset_id": public_id})
            return
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise AssetHostError(f"Failed to delete {public_id}: {e}") from e
        logger.info(f"Deleted asset {public_id}", extra={"asset_id": public_id})


class CloudinaryAssetHost(AssetHost):
    """Uploads to Cloudinary through the official SDK."""

    kind = "cloudinary"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "",
        timeout: float = 30.0
    ):
        if not (cloud_name and api_key and api_secret):
            raise ValueError("Cloudinary cloud name, API key and API secret are required")
        self.folder = folder
        # per-call credentials; the global cloudinary.config() is left untouched
        self.options: Dict[str, Any] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "secure": True,
            "timeout": timeout,
        }

    async def store(self, content: bytes, filename: str, content_type: str) -> StoredAsset:
        options = dict(self.options, resource_type="image")
        if self.folder:
            options["folder"] = self.folder

        try:
            body = await run_in_threadpool(cloudinary.uploader.upload, io.BytesIO(content), **options)
        except cloudinary.exceptions.Error as e:
            raise AssetHostError(f"Cloudinary upload of {filename!r} failed: {e}") from e
        try:
            asset = StoredAsset(url=body["secure_url"], public_id=body["public_id"])
        except (KeyError, TypeError) as e:
            raise AssetHostError(f"Unexpected Cloudinary upload response: {body}") from e

        logger.info(f"Uploaded asset to Cloudinary: {asset.public_id}", extra={"asset_id": asset.public_id})
        return asset

    async def delete(self, public_id: str) -> None:
        try:
            body = await run_in_threadpool(
                cloudinary.uploader.destroy, public_id, resource_type="image", **self.options
            )
        except cloudinary.exceptions.Error as e:
            raise AssetHostError(f"Cloudinary destroy of {public_id} failed: {e}") from e

        result = body.get("result")
        if result == "not found":
            logger.warning(f"Cloudinary asset already gone: {public_id}", extra={"asset_id": public_id})
            return
        if result != "ok":
            raise AssetHostError(f"Cloudinary destroy of {public_id} returned {result!r}")
        logger.info(f"Deleted Cloudinary asset: {public_id}", extra={"asset_id": public_id})


def create_asset_host(settings: Settings) -> AssetHost:
    """Build the asset host selected by ASSET_HOST."""
    kind = settings.asset_host.lower()
    if kind == "local":
        return LocalAssetHost(settings.upload_dir, settings.uploads_url_prefix)
    if kind == "cloudinary":
        return CloudinaryAssetHost(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            timeout=settings.asset_host_timeout
        )
    raise ValueError(f"Unknown asset host: {settings.asset_host}")
