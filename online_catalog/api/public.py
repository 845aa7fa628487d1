"""
PWA assets served at the site root: /sw.js and /{slug}/manifest.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from online_catalog.db import get_db
from online_catalog.repositories.catalog_repo import CatalogRepository
from online_catalog.services.pwa import build_manifest, default_manifest, service_worker_script

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pwa"])


@router.get("/sw.js", summary="Service worker", response_class=Response)
async def service_worker() -> Response:
    return Response(
        service_worker_script(),
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache", "Service-Worker-Allowed": "/"},
    )


@router.get(
    "/{slug}/manifest",
    summary="Store web app manifest",
    description="Falls back to the platform manifest when the store is unknown or cannot be loaded.",
)
async def manifest(slug: str, session: AsyncSession = Depends(get_db)) -> JSONResponse:
    try:
        catalog = await CatalogRepository(session).get_by_slug(slug)
    except SQLAlchemyError:
        logger.exception("manifest_catalog_lookup_failed")
        return JSONResponse(default_manifest(slug), media_type="application/manifest+json")
    return JSONResponse(build_manifest(slug, catalog), media_type="application/manifest+json")
