# hazardscan/services/image_service.py
"""
Image normalization: base64 decoding, size guard, orientation fix,
downscaling and WebP re-encoding. Pure functions, no I/O.
"""
from dataclasses import dataclass
from io import BytesIO
import base64
import binascii
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from hazardscan.core.exceptions import InvalidInput, PayloadTooLarge

logger = logging.getLogger(__name__)

OUTPUT_CONTENT_TYPE = "image/webp"


@dataclass
class NormalizedImage:
    data: bytes
    content_type: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


def strip_data_url(b64: str) -> str:
    """Accept raw base64 or a `data:<mime>;base64,` URL"""
    comma = b64.find(",")
    if b64.startswith("data:") and comma >= 0:
        return b64[comma + 1:]
    return b64


def decoded_size(b64: str) -> int:
    """Exact decoded byte length of a base64 payload, computed without decoding"""
    payload = "".join(strip_data_url(b64).split())
    padding = len(payload) - len(payload.rstrip("="))
    return (len(payload) * 3) // 4 - padding


def ensure_within_limit(b64: str, max_bytes: int) -> int:
    size = decoded_size(b64)
    if size > max_bytes:
        raise PayloadTooLarge(
            "Image too large. Please upload a smaller photo.",
            {"maxBytes": max_bytes, "bytes": size},
        )
    return size


def decode_base64_image(b64: str) -> bytes:
    payload = "".join(strip_data_url(b64).split())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInput("imageData is not valid base64")


def fit_within(width: int, height: int, max_side: int) -> tuple:
    """Target size with the longer edge capped at max_side; never upscales"""
    longest = max(width, height)
    if longest <= max_side:
        return width, height
    scale = max_side / longest
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImageNormalizer:
    """Re-encode client images into a compact, bounded-size WebP"""

    def __init__(self, max_side: int = 1600, quality: int = 72):
        self.max_side = max_side
        self.quality = quality

    def normalize(self, raw: bytes, max_side: int = None, quality: int = None) -> NormalizedImage:
        max_side = max_side or self.max_side
        quality = quality or self.quality

        try:
            with Image.open(BytesIO(raw)) as src:
                src.load()
                image = ImageOps.exif_transpose(src)
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            logger.info(f"Rejected undecodable image: {e}")
            raise InvalidInput("Image could not be decoded")

        try:
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

            target = fit_within(image.width, image.height, max_side)
            if target != image.size:
                image = image.resize(target, Image.Resampling.LANCZOS)

            out = BytesIO()
            image.save(out, format="WEBP", quality=quality, method=5)
        except (ValueError, OSError) as e:
            logger.info(f"Failed to re-encode image: {e}")
            raise InvalidInput("Image could not be processed")
        data = out.getvalue()

        logger.debug(f"Normalized image to {image.width}x{image.height}, {len(data)} bytes")
        return NormalizedImage(
            data=data,
            content_type=OUTPUT_CONTENT_TYPE,
            width=image.width,
            height=image.height,
        )
