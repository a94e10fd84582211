# label_lifecycle/storage/s3_provider.py
"""
S3 asset store implementation using boto3.

Supports:
- AWS S3
- S3-compatible services (MinIO, R2, etc.)
"""

import logging
from typing import Iterable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from label_lifecycle.config import get_settings
from label_lifecycle.errors import ConfigurationError, UpstreamError
from label_lifecycle.logging_config import log_storage_operation
from label_lifecycle.storage.base import AssetStore

logger = logging.getLogger(__name__)

# S3 batch delete supports up to 1000 objects at a time
DELETE_BATCH_SIZE = 1000


class S3AssetStore(AssetStore):
    """
    S3/S3-compatible asset store.

    Configuration via settings:
    - S3_BUCKET: Bucket name (required)
    - S3_ENDPOINT_URL: Custom endpoint for S3-compatible services
    - S3_REGION: AWS region (default: us-east-1)
    - AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: credentials
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        client=None,
    ):
        settings = get_settings()
        self._bucket = bucket or settings.S3_BUCKET
        if not self._bucket:
            raise ConfigurationError("S3 bucket required. Set S3_BUCKET env var or pass bucket.")

        if client is not None:
            self._client = client
        else:
            config = Config(
                retries={"max_attempts": 3, "mode": "adaptive"},
                connect_timeout=5,
                read_timeout=30,
            )
            self._client = boto3.client(
                "s3",
                endpoint_url=endpoint_url or settings.S3_ENDPOINT_URL,
                region_name=region or settings.S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=config,
            )

        logger.info(f"S3 asset store initialized: bucket={self._bucket}")

    @property
    def name(self) -> str:
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def get_text(self, key: str) -> Optional[str]:
        """Read an object as text, None when missing."""
        try:
            with log_storage_operation("get", key) as metrics:
                response = self._client.get_object(Bucket=self._bucket, Key=key)
                body = response["Body"].read()
                metrics["object_count"] = 1
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code in ("NoSuchKey", "404"):
                logger.debug(f"S3 object not found: {key}")
                return None
            raise UpstreamError(f"S3 read failed for {key}: {e}") from e
        except BotoCoreError as e:
            raise UpstreamError(f"S3 read failed for {key}: {e}") from e

        return body.decode("utf-8", errors="replace")

    def list_keys(self, prefix: str) -> list[str]:
        """List all objects with the given prefix."""
        keys: list[str] = []
        try:
            with log_storage_operation("list", prefix) as metrics:
                paginator = self._client.get_paginator("list_objects_v2")
                for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                    for obj in page.get("Contents", []):
                        keys.append(obj["Key"])
                metrics["object_count"] = len(keys)
        except (ClientError, BotoCoreError) as e:
            raise UpstreamError(f"S3 list failed for {prefix}: {e}") from e

        return keys

    def delete_keys(self, keys: Iterable[str]) -> int:
        """Delete keys in batches of 1000."""
        keys = list(keys)
        deleted = 0

        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[i:i + DELETE_BATCH_SIZE]
            try:
                with log_storage_operation("delete", batch[0]) as metrics:
                    response = self._client.delete_objects(
                        Bucket=self._bucket,
                        Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                    )
                    errors = response.get("Errors", []) if response else []
                    if errors:
                        raise UpstreamError(
                            f"S3 refused to delete {len(errors)} object(s), first: {errors[0].get('Key')}"
                        )
                    metrics["object_count"] = len(batch)
            except (ClientError, BotoCoreError) as e:
                raise UpstreamError(f"S3 batch delete failed: {e}") from e
            deleted += len(batch)

        return deleted
