# hazardscan/services/storage_service.py
from typing import Optional, Protocol
import asyncio
import functools
import logging
import posixpath
import re
import secrets

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hazardscan.core.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


class BlobPublisher(Protocol):
    async def publish(self, key: str, data: bytes, content_type: str) -> str:
        """Upload `data` and return its public URL"""
        ...


def sanitize_filename(name: str) -> str:
    """Lowercase, URL-safe object name fragment"""
    cleaned = re.sub(r"[^a-z0-9._-]+", "-", str(name).lower()).strip("-.")
    return cleaned[:80] or "image"


def with_random_suffix(key: str) -> str:
    """`a/b/123.webp` -> `a/b/123-<16 hex>.webp`"""
    root, ext = posixpath.splitext(key)
    return f"{root}-{secrets.token_hex(8)}{ext}"


class S3BlobPublisher:
    """Publish objects to an S3-compatible bucket"""

    def __init__(
        self,
        bucket: Optional[str],
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
        object_acl: Optional[str] = None,
        timeout: float = 30.0,
        client=None,
    ):
        if not bucket:
            logger.warning("S3_BUCKET not configured, image uploads will fail")
        self.bucket = bucket
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.object_acl = object_acl
        self.s3 = client or boto3.client(
            "s3",
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=endpoint,
            region_name=region,
            config=Config(
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={"total_max_attempts": 1},
            ),
        )

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint:
            return f"{self.endpoint}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        extra = {"ACL": self.object_acl} if self.object_acl else {}
        self.s3.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            **extra,
        )

    async def publish(self, key: str, data: bytes, content_type: str) -> str:
        if not self.bucket:
            raise StorageUnavailable("Object storage is not configured")

        final_key = with_random_suffix(key)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None, functools.partial(self._put, final_key, data, content_type)
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload {final_key}: {e}")
            raise StorageUnavailable("Image storage is unavailable")

        logger.info(f"Uploaded {final_key} ({len(data)} bytes)")
        return self.public_url(final_key)
