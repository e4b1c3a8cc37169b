"""
Tests for image normalization: base64 handling, the size guard,
orientation, downscaling and WebP output.
"""
import base64
from io import BytesIO

import pytest
from PIL import Image

from hazardscan.core.exceptions import InvalidInput, PayloadTooLarge
from hazardscan.services.image_service import (
    ImageNormalizer,
    OUTPUT_CONTENT_TYPE,
    decode_base64_image,
    decoded_size,
    ensure_within_limit,
    fit_within,
    strip_data_url,
)
from conftest import encode_image


class TestBase64Helpers:

    def test_strip_data_url_prefix(self):
        assert strip_data_url("data:image/png;base64,QUJD") == "QUJD"

    def test_raw_base64_untouched(self):
        assert strip_data_url("QUJD") == "QUJD"

    @pytest.mark.parametrize("raw", [b"", b"a", b"ab", b"abc", b"abcd", bytes(range(256)) * 3])
    def test_decoded_size_is_exact(self, raw):
        encoded = base64.b64encode(raw).decode()
        assert decoded_size(encoded) == len(raw)
        assert decoded_size(f"data:image/png;base64,{encoded}") == len(raw)

    def test_decoded_size_ignores_whitespace(self):
        encoded = base64.b64encode(b"hello world").decode()
        wrapped = encoded[:6] + "\n" + encoded[6:]
        assert decoded_size(wrapped) == len(b"hello world")

    def test_ensure_within_limit_accepts_boundary(self):
        encoded = base64.b64encode(b"x" * 300).decode()
        assert ensure_within_limit(encoded, 300) == 300

    def test_ensure_within_limit_rejects_oversize(self):
        encoded = base64.b64encode(b"x" * 301).decode()
        with pytest.raises(PayloadTooLarge) as exc_info:
            ensure_within_limit(encoded, 300)
        assert exc_info.value.status_code == 413
        assert exc_info.value.details == {"maxBytes": 300, "bytes": 301}

    def test_decode_rejects_garbage(self):
        with pytest.raises(InvalidInput):
            decode_base64_image("not*base64!")


class TestFitWithin:

    def test_never_upscales(self):
        assert fit_within(800, 600, 1600) == (800, 600)

    def test_caps_longer_edge(self):
        assert fit_within(4000, 3000, 1600) == (1600, 1200)
        assert fit_within(1000, 2000, 1600) == (800, 1600)


class TestImageNormalizer:

    def test_downscales_and_encodes_webp(self):
        image = ImageNormalizer(max_side=1600, quality=72).normalize(encode_image(2000, 1000))

        assert image.content_type == OUTPUT_CONTENT_TYPE == "image/webp"
        assert (image.width, image.height) == (1600, 800)
        assert image.size == len(image.data)

        with Image.open(BytesIO(image.data)) as decoded:
            assert decoded.format == "WEBP"
            assert decoded.size == (1600, 800)

    def test_small_image_keeps_dimensions(self):
        image = ImageNormalizer().normalize(encode_image(320, 240, fmt="JPEG"))
        assert (image.width, image.height) == (320, 240)

    def test_per_call_max_side(self):
        image = ImageNormalizer(max_side=1600).normalize(encode_image(1000, 500), max_side=100)
        assert (image.width, image.height) == (100, 50)

    def test_palette_and_alpha_images(self):
        normalizer = ImageNormalizer()
        assert normalizer.normalize(encode_image(50, 40, mode="RGBA")).width == 50
        assert normalizer.normalize(encode_image(50, 40, fmt="GIF", mode="P")).height == 40

    def test_exif_orientation_applied(self):
        # Orientation 6: stored landscape, displayed rotated 90 degrees
        exif = Image.Exif()
        exif[0x0112] = 6
        out = BytesIO()
        Image.new("RGB", (400, 200), color="blue").save(out, format="JPEG", exif=exif)

        image = ImageNormalizer().normalize(out.getvalue())
        assert (image.width, image.height) == (200, 400)

    def test_undecodable_bytes_rejected(self):
        with pytest.raises(InvalidInput):
            ImageNormalizer().normalize(b"definitely not an image")
