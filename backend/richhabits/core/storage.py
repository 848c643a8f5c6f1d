"""S3/MinIO storage client for generated organization assets."""

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from richhabits.core.config import get_settings


class StorageClient:
    """S3/MinIO storage client for public organization assets.

    Title cards are written under ``org-tiles/{org_id}/`` in a bucket that is
    served publicly, so callers get back a stable URL instead of a presigned
    one.
    """

    def __init__(self) -> None:
        settings = get_settings()

        protocol = "https" if settings.minio_use_ssl else "http"
        self._endpoint_url = f"{protocol}://{settings.minio_endpoint}"

        self._client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            aws_access_key_id=settings.minio_access_key,
            aws_secret_access_key=settings.minio_secret_key,
            config=Config(signature_version="s3v4"),
        )
        self._bucket = settings.minio_bucket
        self._public_base_url = (
            settings.storage_public_base_url.rstrip("/")
            if settings.storage_public_base_url
            else f"{self._endpoint_url}/{self._bucket}"
        )

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def object_exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError:
            return False

    def put_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str,
        *,
        overwrite: bool = True,
    ) -> str:
        """Store ``data`` under ``key`` and return its public URL.

        With ``overwrite=False`` an existing object is left untouched and its
        URL is returned.

        Raises:
            ClientError: If the upload fails
        """
        if not overwrite and self.object_exists(key):
            return self.public_url(key)

        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=data,
            ContentLength=len(data),
            ContentType=content_type,
            CacheControl="public, max-age=300",
        )
        return self.public_url(key)


_storage_client: StorageClient | None = None


def get_storage_client() -> StorageClient:
    """Get storage client singleton instance."""
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
