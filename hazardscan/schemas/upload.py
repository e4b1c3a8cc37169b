# hazardscan/schemas/upload.py
from pydantic import Field
from typing import Optional

from hazardscan.schemas.analysis import CamelModel


class Base64Upload(CamelModel):
    base64: str = Field(min_length=1)
    filename: str = "image"
    max_side: Optional[int] = Field(default=None, ge=64, le=4096)
    quality: Optional[int] = Field(default=None, ge=1, le=100)


class UploadResult(CamelModel):
    ok: bool = True
    url: str
    bytes: int
    width: int
    height: int
    content_type: str
