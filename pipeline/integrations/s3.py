"""S3 integration for resume and assignment storage."""

import uuid
from typing import Any, Optional

import boto3
import structlog
from botocore.exceptions import ClientError

from pipeline.config import get_settings
from pipeline.errors import CollaboratorFailure

logger = structlog.get_logger()


class S3DocumentStore:
    """Stores uploaded files in S3 and hands out download links."""

    def __init__(self, client: Optional[Any] = None):
        config = get_settings()
        if client is None:
            client_kwargs = {"region_name": config.S3_REGION}
            if config.S3_ACCESS_KEY_ID and config.S3_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = config.S3_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = config.S3_SECRET_ACCESS_KEY
            client = boto3.client("s3", **client_kwargs)
        self.client = client
        self.bucket = config.S3_BUCKET
        self.prefix = config.S3_PREFIX

    def _get_key(self, path: str) -> str:
        """Get full S3 key with prefix."""
        return f"{self.prefix.rstrip('/')}/{path.lstrip('/')}"

    async def store(
        self,
        content: bytes,
        folder: str,
        filename: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload a file under a unique key.

        Args:
            content: File content as bytes
            folder: Folder within the prefix, e.g. ``resumes/<job_id>``
            filename: Original filename, kept in metadata and the key suffix
            content_type: MIME type

        Returns:
            Full S3 key
        """
        safe_name = "".join(c if c.isalnum() or c in "._-" else "_" for c in filename) or "upload"
        key = self._get_key(f"{folder}/{uuid.uuid4().hex}-{safe_name}")

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
                Metadata={"original-filename": filename},
            )
        except ClientError as e:
            logger.error("S3 upload failed", error=str(e), key=key)
            raise StorageError(f"Upload failed: {str(e)}") from e

        logger.info("File uploaded to S3", bucket=self.bucket, key=key, size=len(content))
        return key

    async def get_presigned_url(self, reference: str, expires_in: int = 3600) -> str:
        """Generate a presigned URL for download.

        Args:
            reference: Full S3 key
            expires_in: URL validity in seconds

        Returns:
            Presigned URL
        """
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": reference},
                ExpiresIn=expires_in,
            )
        except ClientError as e:
            logger.error("Presigned URL generation failed", error=str(e), key=reference)
            raise StorageError(f"Presigned URL failed: {str(e)}") from e


class StorageError(CollaboratorFailure):
    """Raised when S3 operations fail."""

    def __init__(self, message: str):
        super().__init__(message, retryable=True, collaborator="storage")
