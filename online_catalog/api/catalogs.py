"""
GET /api/v1/catalogs/check-name: slug availability for the create and settings forms.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.db import get_db
from online_catalog.schemas.catalog import NameAvailability
from online_catalog.services import catalog_service

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


@router.get("/check-name", response_model=NameAvailability, summary="Check slug availability")
async def check_name(
    name: str = Query(..., max_length=100),
    session: AsyncSession = Depends(get_db),
) -> NameAvailability:
    return await catalog_service.check_name(session, name.strip())
