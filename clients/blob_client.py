"""
S3 blob store for profile images.

Objects get a random key under a fixed prefix and are addressed by a public
URL built from the bucket (or a configured CDN base URL).
"""

import logging
import uuid

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class BlobStoreError(Exception):
    """Raised when the blob store rejects or fails an upload."""


class BlobStoreClient:
    """Upload binary objects to S3 and return their retrieval URL."""

    def __init__(
        self,
        bucket_name: str,
        region: str,
        key_prefix: str = "profile-images",
        public_base_url: str | None = None,
        s3_client=None,
    ):
        """
        Initialize the blob store.

        Args:
            bucket_name: Target S3 bucket
            region: AWS region of the bucket
            key_prefix: Folder-like prefix for uploaded objects
            public_base_url: Base URL objects are served from; defaults to
                the bucket's virtual-hosted S3 URL
            s3_client: Preconfigured boto3 S3 client (created lazily if None)

        Raises:
            ValueError: If bucket_name or region is empty
        """
        if not bucket_name:
            raise ValueError("bucket_name is required")
        if not region:
            raise ValueError("region is required")

        self.bucket_name = bucket_name
        self.region = region
        self.key_prefix = key_prefix.strip("/")
        self.public_base_url = (
            public_base_url or f"https://{bucket_name}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        self._s3_client = s3_client

    @property
    def s3_client(self):
        """Get or create S3 client."""
        if self._s3_client is None:
            self._s3_client = boto3.client("s3", region_name=self.region)
        return self._s3_client

    def _object_key(self, content_type: str | None) -> str:
        extension = _EXTENSIONS.get(content_type or "", "")
        return f"{self.key_prefix}/{uuid.uuid4().hex}{extension}"

    def upload(self, data: bytes, content_type: str | None = None) -> str:
        """
        Store data and return its URL.

        Blocks until S3 acknowledges or errors; there is no partial state.

        Raises:
            BlobStoreError: On any S3 failure
        """
        key = self._object_key(content_type)
        extra = {"ContentType": content_type} if content_type else {}

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                **extra,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload to {self.bucket_name}/{key} failed: {e}")
            raise BlobStoreError(f"Upload failed: {e}")

        url = f"{self.public_base_url}/{key}"
        logger.info(f"Uploaded {len(data)} bytes to {url}")
        return url
