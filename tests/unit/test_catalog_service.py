"""
Unit tests: catalog creation with logo upload compensation, plan limits.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from online_catalog.core.errors import Conflict, UploadFailed
from online_catalog.models.catalog import CatalogPlan
from online_catalog.services import catalog_service
from online_catalog.services.images import IncomingFile


def merchant():
    return SimpleNamespace(id=uuid4(), email="owner@shop.com", phone="+2001012345678")


def logo():
    return IncomingFile(filename="logo.png", content_type="image/png", data=b"png-bytes")


def repo_mock(create_side_effect=None):
    repo = AsyncMock()
    repo.get_for_user = AsyncMock(return_value=None)
    repo.name_available = AsyncMock(return_value=True)
    repo.create = AsyncMock(side_effect=create_side_effect)
    return repo


def test_plan_limits():
    assert catalog_service.plan_limits(CatalogPlan.BASIC) == (50, 3)
    assert catalog_service.plan_limits(CatalogPlan.PRO) == (None, None)
    assert catalog_service.plan_limits(CatalogPlan.BUSINESS) == (None, None)
    info = catalog_service.plan_info(CatalogPlan.BASIC)
    assert info.label == "الباقة الأساسية"
    assert info.item_limit == 50


@pytest.mark.asyncio
async def test_failed_insert_removes_uploaded_logo():
    session = AsyncMock()
    repo = repo_mock(IntegrityError("INSERT INTO catalogs", {}, Exception("duplicate key")))
    with patch.object(catalog_service, "CatalogRepository", return_value=repo), patch.object(
        catalog_service, "upload_image", AsyncMock(return_value=("http://cdn/logos/u-1.webp", "u-1.webp"))
    ), patch.object(catalog_service.storage_client, "remove_objects", AsyncMock(return_value=True)) as remove:
        with pytest.raises(Conflict) as exc:
            await catalog_service.create_catalog(session, merchant(), "Demo Shop", "demo-shop", None, logo())

    assert exc.value.code == "catalog_create_failed"
    session.rollback.assert_awaited_once()
    remove.assert_awaited_once_with("logos", ["u-1.webp"])


@pytest.mark.asyncio
async def test_failed_logo_upload_creates_nothing():
    session = AsyncMock()
    repo = repo_mock()
    with patch.object(catalog_service, "CatalogRepository", return_value=repo), patch.object(
        catalog_service, "upload_image", AsyncMock(side_effect=UploadFailed("فشل تحميل الشعار."))
    ):
        with pytest.raises(UploadFailed):
            await catalog_service.create_catalog(session, merchant(), "Demo Shop", "demo-shop", None, logo())
    repo.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_successful_create_keeps_logo_and_defaults_whatsapp_to_phone():
    session = AsyncMock()
    repo = repo_mock()
    with patch.object(catalog_service, "CatalogRepository", return_value=repo), patch.object(
        catalog_service, "upload_image", AsyncMock(return_value=("http://cdn/logos/u-1.webp", "u-1.webp"))
    ), patch.object(catalog_service.storage_client, "remove_objects", AsyncMock()) as remove:
        catalog = await catalog_service.create_catalog(session, merchant(), "Demo Shop", None, None, logo())

    assert catalog.name == "demo-shop"
    assert catalog.logo_url == "http://cdn/logos/u-1.webp"
    assert catalog.whatsapp_number == "+2001012345678"
    remove.assert_not_awaited()


def test_normalize_whatsapp():
    assert catalog_service.normalize_whatsapp("010 1234-5678") == "+2001012345678"
    assert catalog_service.normalize_whatsapp("+971501234567") == "+971501234567"
    assert catalog_service.normalize_whatsapp("501234567", "+971") == "+971501234567"
    assert catalog_service.normalize_whatsapp("") is None


def test_object_path_of_public_urls():
    storage = catalog_service.storage_client
    url = storage.public_url(storage.COVERS_BUCKET, "u-1-1700000000000.webp")
    assert storage.object_path(storage.COVERS_BUCKET, url) == "u-1-1700000000000.webp"
    assert storage.object_path(storage.LOGOS_BUCKET, url) is None
    assert storage.object_path(storage.COVERS_BUCKET, "https://cdn.example.com/cover.png") is None
    assert storage.object_path(storage.COVERS_BUCKET, None) is None
