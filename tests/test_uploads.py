"""Tests for standalone image uploads"""
from io import BytesIO

import pytest
from PIL import Image

from hazardscan.core.config import settings
from conftest import encode_image


@pytest.mark.asyncio
class TestUploads:

    async def test_base64_upload(self, client, auth_headers, png_base64, publisher):
        response = await client.post(
            "/api/uploads/base64",
            json={"base64": png_base64, "filename": "Loading Dock.png", "maxSide": 500, "quality": 60},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["width"], body["height"]) == (500, 250)
        assert body["contentType"] == "image/webp"

        (key, _), = publisher.calls
        assert key.endswith("-loading-dock.png.webp")
        assert body["url"] == f"https://blob.test/{key}"
        assert body["bytes"] == len(publisher.objects[key])

    async def test_base64_upload_validates_options(self, client, auth_headers, png_base64):
        response = await client.post(
            "/api/uploads/base64", json={"base64": png_base64, "quality": 0}, headers=auth_headers
        )
        assert response.status_code == 400

    async def test_base64_upload_size_guard(self, client, auth_headers, png_base64, monkeypatch):
        monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 100)
        response = await client.post("/api/uploads/base64", json={"base64": png_base64}, headers=auth_headers)
        assert response.status_code == 413

    async def test_file_upload(self, client, auth_headers, publisher):
        files = {"file": ("site.jpg", encode_image(3200, 1600, fmt="JPEG"), "image/jpeg")}

        response = await client.post("/api/uploads/file", files=files, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert (body["width"], body["height"]) == (1600, 800)
        (key, _), = publisher.calls
        with Image.open(BytesIO(publisher.objects[key])) as stored:
            assert stored.format == "WEBP"

    async def test_file_upload_cap(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_FILE_BYTES", 50)
        files = {"file": ("site.jpg", encode_image(100, 100, fmt="JPEG"), "image/jpeg")}

        response = await client.post("/api/uploads/file", files=files, headers=auth_headers)
        assert response.status_code == 413

    async def test_file_upload_requires_file(self, client, auth_headers):
        response = await client.post("/api/uploads/file", data={"other": "x"}, headers=auth_headers)
        assert response.status_code == 400

    async def test_storage_failure(self, client, auth_headers, png_base64, storage_down):
        response = await client.post("/api/uploads/base64", json={"base64": png_base64}, headers=auth_headers)
        assert response.status_code == 503

    async def test_requires_auth(self, client, png_base64):
        response = await client.post("/api/uploads/base64", json={"base64": png_base64})
        assert response.status_code == 401


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"]
