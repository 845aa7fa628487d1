"""
Object storage integration (Supabase-compatible storage REST API).
Uploads return the public URL; failures are logged and reported as None/False, never raised.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from online_catalog.config import get_settings

logger = logging.getLogger(__name__)

LOGOS_BUCKET = "logos"
COVERS_BUCKET = "covers"
MENU_IMAGES_BUCKET = "menu_images"


def _headers() -> dict[str, str]:
    key = get_settings().storage_service_key
    return {"Authorization": f"Bearer {key}", "apikey": key}


def public_url(bucket: str, path: str) -> str:
    return f"{get_settings().storage_url.rstrip('/')}/object/public/{bucket}/{path}"


def object_path(bucket: str, url: Optional[str]) -> Optional[str]:
    """Inverse of public_url; None for URLs outside the bucket (e.g. external images)."""
    prefix = public_url(bucket, "")
    if not url or not url.startswith(prefix) or len(url) == len(prefix):
        return None
    return url[len(prefix):]


async def upload_object(bucket: str, path: str, data: bytes, content_type: str) -> Optional[str]:
    """
    POST the bytes to {storage_url}/object/{bucket}/{path}.
    Returns the public URL, or None when the storage service refuses or is unreachable.
    """
    settings = get_settings()
    url = f"{settings.storage_url.rstrip('/')}/object/{bucket}/{path}"
    headers = {**_headers(), "Content-Type": content_type, "x-upsert": "false"}
    try:
        async with httpx.AsyncClient(timeout=settings.storage_request_timeout) as client:
            resp = await client.post(url, content=data, headers=headers)
            body = resp.json() if resp.headers.get("content-type", "").startswith("application/json") else {}
            logger.info(
                "storage_upload",
                extra={
                    "storage_response": {"status_code": resp.status_code, "body": body},
                    "bucket": bucket,
                    "size": len(data),
                },
            )
            if resp.status_code < 200 or resp.status_code >= 300:
                return None
            return public_url(bucket, path)
    except Exception as e:
        logger.exception("storage_upload_failed", extra={"error": str(e), "url": url})
        return None


async def remove_objects(bucket: str, paths: list[str]) -> bool:
    """DELETE {storage_url}/object/{bucket} with {"prefixes": paths}."""
    if not paths:
        return True
    settings = get_settings()
    url = f"{settings.storage_url.rstrip('/')}/object/{bucket}"
    try:
        async with httpx.AsyncClient(timeout=settings.storage_request_timeout) as client:
            resp = await client.request("DELETE", url, json={"prefixes": paths}, headers=_headers())
            logger.info(
                "storage_remove",
                extra={"storage_response": {"status_code": resp.status_code}, "bucket": bucket},
            )
            return 200 <= resp.status_code < 300
    except Exception as e:
        logger.exception("storage_remove_failed", extra={"error": str(e), "url": url})
        return False
