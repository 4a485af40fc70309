"""Media storage for season images (S3-compatible or local filesystem)."""

import logging
import os
import uuid
from typing import Iterable, Optional

import boto3
from botocore.exceptions import ClientError

from app.config import settings
from app.models.media import UploadedFile

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}


def build_object_key(prefix: str, upload: UploadedFile) -> str:
    """Return a collision-free storage key such as 'seasons/3f2a...c1.png'."""
    ext = _EXTENSIONS.get(upload.content_type) or os.path.splitext(upload.filename)[1].lower()
    return f"{prefix.strip('/')}/{uuid.uuid4().hex}{ext}"


class MediaStorage:
    """Thin wrapper around boto3 for storing uploaded media.

    Supports both AWS S3 and S3-compatible services (Tigris, R2, MinIO).
    Falls back to local filesystem storage when image_storage_local is True.
    Stored references are object keys; get_public_url() turns them into URLs.
    """

    def __init__(
        self,
        use_local: Optional[bool] = None,
        local_dir: Optional[str] = None,
    ) -> None:
        self.bucket = settings.s3_bucket_name
        self.public_url_base = settings.s3_public_url_base
        self.use_local = settings.image_storage_local if use_local is None else use_local
        self.local_dir = local_dir or settings.upload_dir
        self._client = None

    @property
    def client(self):
        """Lazily initialize the S3 client."""
        if self._client is None:
            client_kwargs: dict[str, str] = {
                "region_name": settings.s3_region,
            }
            if settings.s3_access_key_id and settings.s3_secret_access_key:
                client_kwargs["aws_access_key_id"] = settings.s3_access_key_id
                client_kwargs["aws_secret_access_key"] = settings.s3_secret_access_key
            if settings.s3_endpoint_url:
                client_kwargs["endpoint_url"] = settings.s3_endpoint_url

            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    def save(self, prefix: str, upload: UploadedFile) -> str:
        """Store an upload under prefix and return its object key."""
        key = build_object_key(prefix, upload)
        if self.use_local:
            self._save_local(key, upload.content)
            return key

        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME not configured")

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=upload.content,
                ContentType=upload.content_type,
            )
            logger.info(f"Uploaded {key} to S3 bucket {self.bucket}")
            return key
        except ClientError as e:
            logger.error(f"Failed to upload {key} to S3: {e}")
            raise

    def delete(self, key: str) -> None:
        """Delete a stored object."""
        if self.use_local:
            self._delete_local(key)
            return

        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME not configured")

        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"Deleted {key} from S3 bucket {self.bucket}")
        except ClientError as e:
            logger.error(f"Failed to delete {key} from S3: {e}")
            raise

    def delete_many(self, keys: Iterable[str]) -> int:
        """Best-effort deletion of orphaned objects after a committed change.

        Returns:
            Number of objects deleted
        """
        deleted = 0
        for key in keys:
            try:
                self.delete(key)
                deleted += 1
            except (ClientError, OSError) as e:
                logger.warning(f"Could not garbage-collect {key}: {e}")
        return deleted

    def get_public_url(self, key: str) -> str:
        """Return public URL for a key.

        Uses configured public_url_base (CDN) if available,
        otherwise constructs direct S3 URL.
        """
        if self.use_local:
            return f"/uploads/{key}"

        if self.public_url_base:
            base = self.public_url_base.rstrip("/")
            return f"{base}/{key}"

        if settings.s3_endpoint_url:
            endpoint = settings.s3_endpoint_url.rstrip("/")
            return f"{endpoint}/{self.bucket}/{key}"

        return f"https://{self.bucket}.s3.{settings.s3_region}.amazonaws.com/{key}"

    def _save_local(self, key: str, data: bytes) -> None:
        local_path = os.path.join(self.local_dir, key)
        os.makedirs(os.path.dirname(local_path), exist_ok=True)

        with open(local_path, "wb") as f:
            f.write(data)

        logger.info(f"Saved {key} to local filesystem")

    def _delete_local(self, key: str) -> None:
        local_path = os.path.join(self.local_dir, key)
        if os.path.exists(local_path):
            os.remove(local_path)
            logger.info(f"Deleted {key} from local filesystem")


# Singleton instance for convenience
media_storage = MediaStorage()


def get_media_storage() -> MediaStorage:
    """FastAPI dependency returning the shared storage backend."""
    return media_storage
