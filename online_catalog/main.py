"""
Online Catalog API.
Multi-tenant digital catalogs: merchants build a storefront of categories and products,
customers order through WhatsApp links. JWT auth with role (merchant/admin).
"""
from __future__ import annotations

import time
import uuid as uuid_lib

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from online_catalog.api import admin, auth, catalogs, dashboard, public, storefront
from online_catalog.config import get_settings
from online_catalog.core.errors import CatalogError, catalog_error_handler
from online_catalog.core.logging import get_logger, request_id_ctx
from online_catalog.db import get_db

logger = get_logger("online_catalog")
settings = get_settings()

if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1,
        integrations=[FastApiIntegration()],
    )

app = FastAPI(
    title="Online Catalog API",
    description="Digital catalogs with WhatsApp ordering: storefront, cart, merchant dashboard.",
    version="1.0.0",
    openapi_tags=[
        {"name": "storefront", "description": "Public catalog pages and cart"},
        {"name": "auth", "description": "Sign-up, login, confirmation, password recovery"},
        {"name": "dashboard", "description": "Merchant catalog management"},
        {"name": "catalogs", "description": "Slug availability"},
        {"name": "admin", "description": "Plan management (admin only)"},
        {"name": "pwa", "description": "Manifest and service worker"},
    ],
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    # The cart cookie travels with storefront requests
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(CatalogError, catalog_error_handler)

REQUEST_COUNT = Counter("http_requests_total", "Total requests", ["method", "path", "status"])
REQUEST_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["method", "path"])


def _route_path(request: Request) -> str:
    # Route template, e.g. /api/v1/storefront/{slug}
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.scope.get("path", "")


def _observe(request: Request, status_code: int, seconds: float) -> None:
    path = _route_path(request)
    REQUEST_COUNT.labels(method=request.method, path=path, status=status_code).inc()
    REQUEST_LATENCY.labels(method=request.method, path=path).observe(seconds)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid_lib.uuid4())
    token = request_id_ctx.set(request_id)
    start = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        request_id_ctx.reset(token)
    _observe(request, response.status_code, time.perf_counter() - start)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
async def health(session: AsyncSession = Depends(get_db)):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("health_database_unreachable")
        return JSONResponse({"status": "degraded", "database": "unreachable"}, status_code=503)
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type="text/plain")


@app.get("/")
async def root():
    return {"message": "Online Catalog API", "docs": "/docs"}


for router in (storefront.router, auth.router, dashboard.router, catalogs.router, admin.router):
    app.include_router(router, prefix=settings.api_prefix)
# /{slug}/manifest is a catch-all pattern, so the site-root router goes last
app.include_router(public.router)
