# hazardscan/api/v1/uploads.py
from fastapi import APIRouter, Depends, File, Request, UploadFile
from typing import Optional
import asyncio
import functools
import time

from hazardscan.api.dependencies import get_current_active_user
from hazardscan.core.config import settings
from hazardscan.core.exceptions import PayloadTooLarge
from hazardscan.db.models.user import User
from hazardscan.schemas.upload import Base64Upload, UploadResult
from hazardscan.services.image_service import decode_base64_image, ensure_within_limit
from hazardscan.services.storage_service import sanitize_filename

router = APIRouter()


async def normalize_and_publish(
    request: Request,
    user: User,
    raw: bytes,
    filename: str,
    max_side: Optional[int] = None,
    quality: Optional[int] = None,
) -> UploadResult:
    state = request.app.state
    loop = asyncio.get_running_loop()
    image = await loop.run_in_executor(
        None, functools.partial(state.normalizer.normalize, raw, max_side=max_side, quality=quality)
    )

    key = f"inspections/{user.id}/{int(time.time() * 1000)}-{sanitize_filename(filename)}.webp"
    url = await state.publisher.publish(key, image.data, image.content_type)
    return UploadResult(
        url=url,
        bytes=image.size,
        width=image.width,
        height=image.height,
        content_type=image.content_type,
    )


@router.post("/base64", response_model=UploadResult)
async def upload_base64(
    body: Base64Upload,
    request: Request,
    current_user: User = Depends(get_current_active_user),
):
    """Normalize and store a base64 image without analyzing it"""
    ensure_within_limit(body.base64, settings.MAX_IMAGE_BYTES)
    raw = decode_base64_image(body.base64)
    return await normalize_and_publish(
        request, current_user, raw, body.filename, max_side=body.max_side, quality=body.quality
    )


@router.post("/file", response_model=UploadResult)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
):
    """Normalize and store a multipart image (field `file`)"""
    limit = settings.MAX_UPLOAD_FILE_BYTES
    raw = await file.read(limit + 1)
    if len(raw) > limit:
        raise PayloadTooLarge("File too large", {"maxBytes": limit})

    return await normalize_and_publish(request, current_user, raw, file.filename or "image")
