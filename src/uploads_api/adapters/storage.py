"""
Storage backends for uploaded images.

``LocalDiskStorage`` keeps files in a flat uploads directory that the app
serves under ``/uploads``. ``CloudinaryStorage`` pushes them to Cloudinary and
only exists when all three Cloudinary credentials are configured.
"""

import io
import logging
import os
import random
import re
import tempfile
import time
from pathlib import Path
from typing import List, Optional

import cloudinary.api
import cloudinary.uploader
from fastapi.concurrency import run_in_threadpool

from uploads_api.config.settings import Settings
from uploads_api.errors import LocalStorageError, RemoteStorageError
from uploads_api.models import StoredFileRecord

logger = logging.getLogger(__name__)

LISTABLE_FILENAME = re.compile(r"\.(jpe?g|png|gif)$", re.IGNORECASE)
REMOTE_LIST_MAX_RESULTS = 100
RANDOM_SUFFIX_MAX = 10 ** 9
PARTIAL_SUFFIX = ".part"


def generate_unique_key(base: str) -> str:
    """Build ``<base>-<epoch millis>-<random int>``; empty bases become ``file``."""
    millis = time.time_ns() // 1_000_000
    return f"{base or 'file'}-{millis}-{random.randint(0, RANDOM_SUFFIX_MAX)}"


class LocalDiskStorage:
    """Stores uploads as flat files inside a single directory."""

    def __init__(self, uploads_dir: Path, public_base_url: str):
        self.uploads_dir = Path(uploads_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def ensure_directory(self) -> Path:
        try:
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalStorageError(f"Cannot create uploads directory: {e.strerror or e}") from e
        return self.uploads_dir

    def url_for(self, filename: str) -> str:
        return f"{self.public_base_url}/uploads/{filename}"

    async def store(self, content: bytes, sanitized_name: str, extension: str) -> StoredFileRecord:
        """
        Write ``content`` under a freshly generated unique name.

        :param content: The complete file body.
        :param sanitized_name: The sanitized original filename, with or without its extension.
        :param extension: The extension to store the file under, including the leading dot.
        """
        base = os.path.splitext(sanitized_name)[0]
        filename = f"{generate_unique_key(base)}{extension.lower()}"
        await run_in_threadpool(self._write_atomic, filename, content)
        logger.info("Stored %d bytes locally as %s", len(content), filename)
        return StoredFileRecord(
            storage_key=filename,
            display_name=sanitized_name,
            access_url=self.url_for(filename),
        )

    def _write_atomic(self, filename: str, content: bytes) -> None:
        target_dir = self.ensure_directory()
        tmp_path = None
        try:
            # the temp name ends in .part so it never shows up in listings
            with tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=str(target_dir), prefix=".", suffix=PARTIAL_SUFFIX
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, target_dir / filename)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise LocalStorageError(f"Failed to write {filename}: {e.strerror or e}") from e

    async def list(self) -> List[StoredFileRecord]:
        names = await run_in_threadpool(self._scan)
        return [
            StoredFileRecord(storage_key=name, display_name=name, access_url=self.url_for(name))
            for name in names
        ]

    def _scan(self) -> List[str]:
        target_dir = self.ensure_directory()
        try:
            with os.scandir(target_dir) as entries:
                return [
                    entry.name
                    for entry in entries
                    if entry.is_file() and LISTABLE_FILENAME.search(entry.name)
                ]
        except OSError as e:
            raise LocalStorageError(f"Failed to read uploads directory: {e.strerror or e}") from e


class CloudinaryStorage:
    """Stores uploads on Cloudinary under a single logical folder."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "fileuploader"):
        self.folder = folder
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["CloudinaryStorage"]:
        """Return a configured backend, or None when any credential is missing."""
        if not settings.remote_storage_configured:
            return None
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    async def store(self, content: bytes, original_name: str, sanitized_name: str) -> StoredFileRecord:
        """
        Upload ``content`` to Cloudinary.

        Cloudinary appends the format itself, so the public id is built from the
        sanitized name without its extension.
        """
        public_id = generate_unique_key(os.path.splitext(sanitized_name)[0])
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(content),
                folder=self.folder,
                public_id=public_id,
                resource_type="image",
                overwrite=False,
                **self._credentials,
            )
        except Exception as e:
            raise RemoteStorageError(f"Cloudinary upload failed: {e}") from e

        try:
            record = StoredFileRecord(
                storage_key=result["public_id"],
                display_name=original_name,
                access_url=result["secure_url"],
            )
        except (KeyError, TypeError) as e:
            raise RemoteStorageError(f"Unexpected Cloudinary upload response: {e}") from e
        logger.info("Uploaded %s to Cloudinary as %s", original_name, record.storage_key)
        return record

    async def list(self, prefix: Optional[str] = None) -> List[StoredFileRecord]:
        try:
            result = await run_in_threadpool(
                cloudinary.api.resources,
                type="upload",
                prefix=prefix or self.folder,
                max_results=REMOTE_LIST_MAX_RESULTS,
                resource_type="image",
                **self._credentials,
            )
        except Exception as e:
            raise RemoteStorageError(f"Cloudinary listing failed: {e}") from e

        records = []
        for resource in result.get("resources") or []:
            public_id = resource.get("public_id")
            url = resource.get("secure_url")
            if not public_id or not url:
                logger.warning("Skipping Cloudinary resource without public_id/secure_url: %s", resource)
                continue
            records.append(
                StoredFileRecord(
                    storage_key=public_id,
                    display_name=public_id.rsplit("/", 1)[-1],
                    access_url=url,
                )
            )
        return records
