"""
Admin: plan changes for any catalog (admin only).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.core.auth import require_role
from online_catalog.db import get_db
from online_catalog.models.user import User, UserRole
from online_catalog.schemas.catalog import CatalogResponse, PlanUpdate
from online_catalog.services import catalog_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.patch(
    "/catalogs/{catalog_id}/plan",
    response_model=CatalogResponse,
    summary="Change catalog plan",
    description="Plan upgrades are handled by support; plan is one of basic, pro, business.",
)
async def update_plan(
    catalog_id: int,
    body: PlanUpdate,
    current_user: User = require_role(UserRole.ADMIN),
    session: AsyncSession = Depends(get_db),
) -> CatalogResponse:
    catalog = await catalog_service.set_plan(session, catalog_id, body.plan)
    return catalog_service.catalog_response(catalog)
