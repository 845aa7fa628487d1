"""
Upload checks and server-side image compression (Pillow).
Images are bounded to a max dimension and re-encoded as WebP, stepping quality down
until the payload fits the target size. On any decoding problem the original bytes are kept;
images whose pixel count exceeds Pillow's decompression-bomb limit are rejected.
"""
from __future__ import annotations

import io
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable

from PIL import Image, ImageOps, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from online_catalog.config import get_settings
from online_catalog.core.errors import InvalidInput, UploadFailed
from online_catalog.services import storage_client

logger = logging.getLogger(__name__)

ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
_QUALITY_STEPS = (85, 75, 65, 55, 45)


@dataclass
class PreparedImage:
    data: bytes
    content_type: str
    extension: str


def validate_image(content_type: str | None, size: int) -> None:
    if size > get_settings().max_upload_bytes:
        raise InvalidInput(code="file_too_large")
    if content_type not in ACCEPTED_IMAGE_TYPES:
        raise InvalidInput(code="file_type")


def _extension(filename: str | None, content_type: str) -> str:
    suffix = PurePath(filename or "").suffix.lstrip(".").lower()
    if suffix:
        return suffix
    return {"image/png": "png", "image/webp": "webp"}.get(content_type, "jpg")


def _too_many_pixels(img: Image.Image) -> bool:
    # Image.open only warns between MAX_IMAGE_PIXELS and twice that; decoding is refused here
    limit = Image.MAX_IMAGE_PIXELS
    return limit is not None and img.width * img.height > limit


def compress_image(data: bytes, filename: str | None, content_type: str | None) -> PreparedImage:
    settings = get_settings()
    content_type = "image/jpeg" if content_type in (None, "image/jpg") else content_type
    original = PreparedImage(data, content_type, _extension(filename, content_type))
    try:
        with Image.open(io.BytesIO(data)) as img:
            if _too_many_pixels(img):
                raise InvalidInput(code="file_too_large")
            img = ImageOps.exif_transpose(img)
            img.thumbnail((settings.image_max_dimension, settings.image_max_dimension))
            if img.mode not in ("RGB", "RGBA"):
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                img = img.convert("RGBA" if has_alpha else "RGB")
            out = b""
            for quality in _QUALITY_STEPS:
                buf = io.BytesIO()
                img.save(buf, format="WEBP", quality=quality, method=4)
                out = buf.getvalue()
                if len(out) <= settings.image_target_bytes:
                    break
    except Image.DecompressionBombError:
        raise InvalidInput(code="file_too_large")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("image_compression_failed: %s", e)
        return original
    if len(out) >= len(data) and content_type == "image/webp":
        return original
    return PreparedImage(out, "image/webp", "webp")


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def item_image_path(user_id: str, extension: str) -> str:
    """menu_images/{user_id}/{ms}-{rand}.{ext}"""
    return f"{user_id}/{timestamp_ms()}-{secrets.token_hex(3)}.{extension}"


def branding_path(user_id: str, extension: str) -> str:
    """logos/covers: {user_id}-{ms}.{ext}"""
    return f"{user_id}-{timestamp_ms()}.{extension}"


@dataclass
class IncomingFile:
    filename: str | None
    content_type: str | None
    data: bytes


async def upload_image(
    bucket: str, path_for: Callable[[str], str], upload: IncomingFile, failure_message: str
) -> tuple[str, str]:
    """
    Validate, compress off the event loop, upload. Returns (public_url, object_path).
    Raises InvalidInput for a rejected file and UploadFailed when storage refuses it.
    """
    validate_image(upload.content_type, len(upload.data))
    prepared = await run_in_threadpool(compress_image, upload.data, upload.filename, upload.content_type)
    path = path_for(prepared.extension)
    url = await storage_client.upload_object(bucket, path, prepared.data, prepared.content_type)
    if url is None:
        raise UploadFailed(failure_message)
    return url, path
