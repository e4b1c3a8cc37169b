"""Tests for the S3 blob publisher"""
import re

import pytest
from botocore.exceptions import ClientError

from hazardscan.core.exceptions import StorageUnavailable
from hazardscan.services.storage_service import S3BlobPublisher, sanitize_filename, with_random_suffix


class FakeS3:
    def __init__(self, error=None):
        self.error = error
        self.puts = []

    def put_object(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.puts.append(kwargs)


def test_random_suffix_keeps_prefix_and_extension():
    key = with_random_suffix("inspections/u1/1700000000000.webp")
    assert re.fullmatch(r"inspections/u1/1700000000000-[0-9a-f]{16}\.webp", key)
    assert with_random_suffix("a/b.webp") != with_random_suffix("a/b.webp")


def test_sanitize_filename():
    assert sanitize_filename("My Site Photo (1).JPG") == "my-site-photo-1-.jpg"
    assert sanitize_filename("///") == "image"
    assert len(sanitize_filename("x" * 200)) == 80


@pytest.mark.asyncio
class TestS3BlobPublisher:

    async def test_publish_puts_object_and_returns_public_url(self):
        s3 = FakeS3()
        publisher = S3BlobPublisher(
            bucket="hazards",
            public_base_url="https://cdn.test/",
            object_acl="public-read",
            client=s3,
        )

        url = await publisher.publish("inspections/u1/1.webp", b"data", "image/webp")

        put = s3.puts[0]
        assert put["Bucket"] == "hazards"
        assert put["ContentType"] == "image/webp"
        assert put["ACL"] == "public-read"
        assert put["Key"].startswith("inspections/u1/1-")
        assert url == f"https://cdn.test/{put['Key']}"

    async def test_default_public_url(self):
        s3 = FakeS3()
        publisher = S3BlobPublisher(bucket="hazards", region="eu-west-1", client=s3)

        url = await publisher.publish("k.webp", b"data", "image/webp")
        assert url.startswith("https://hazards.s3.eu-west-1.amazonaws.com/k-")
        assert "ACL" not in s3.puts[0]

    async def test_client_error_maps_to_storage_unavailable(self):
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        publisher = S3BlobPublisher(bucket="hazards", client=FakeS3(error=error))

        with pytest.raises(StorageUnavailable) as exc_info:
            await publisher.publish("k.webp", b"data", "image/webp")
        assert exc_info.value.status_code == 503

    async def test_missing_bucket(self):
        publisher = S3BlobPublisher(bucket=None, client=FakeS3())
        with pytest.raises(StorageUnavailable):
            await publisher.publish("k.webp", b"data", "image/webp")
