"""S3-compatible object store access (Cloudflare R2 by default)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ObjectStoreError, VersionExistsError

if TYPE_CHECKING:
    from ..config import DeployConfig

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_PRECONDITION_CODES = {"412", "PreconditionFailed", "ConditionalRequestConflict"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class ObjectStoreAdapter:
    """Existence checks and uploads against a single bucket."""

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def exists(self, key: str) -> bool:
        """Return True if ``key`` exists in the bucket.

        Raises:
            ObjectStoreError: For any failure other than "not found"
        """
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise ObjectStoreError(
                f"Existence check for s3://{self.bucket}/{key} failed: {e}"
            ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(
                f"Existence check for s3://{self.bucket}/{key} failed: {e}"
            ) from e
        return True

    def upload_file(
        self,
        key: str,
        path: Path,
        content_type: str,
        if_not_exists: bool = False,
    ) -> None:
        """Upload a local file to ``key``.

        Args:
            key: Destination object key
            path: Local file to upload
            content_type: Content-Type stored with the object
            if_not_exists: Send ``If-None-Match: *`` so an existing object is
                never overwritten

        Raises:
            VersionExistsError: If ``if_not_exists`` is set and the key exists
            ObjectStoreError: For any other failure
        """
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": Path(path).read_bytes(),
            "ContentType": content_type,
        }
        if if_not_exists:
            params["IfNoneMatch"] = "*"

        logger.info(
            "Uploading %s to s3://%s/%s", path, self.bucket, key, extra={"object_key": key}
        )
        try:
            self.client.put_object(**params)
        except ClientError as e:
            if if_not_exists and _error_code(e) in _PRECONDITION_CODES:
                raise VersionExistsError(key) from e
            raise ObjectStoreError(
                f"Upload to s3://{self.bucket}/{key} failed: {e}"
            ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(
                f"Upload to s3://{self.bucket}/{key} failed: {e}"
            ) from e


def create_object_store(
    config: "DeployConfig", client: Optional[Any] = None
) -> ObjectStoreAdapter:
    """Create an object store adapter for the configured bucket.

    Args:
        config: Validated deploy configuration
        client: Pre-built boto3 S3 client (optional)

    Returns:
        ObjectStoreAdapter instance
    """
    if client is None:
        client = boto3.client(
            "s3",
            endpoint_url=config.resolved_endpoint_url,
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
        )
    return ObjectStoreAdapter(client, config.bucket)
