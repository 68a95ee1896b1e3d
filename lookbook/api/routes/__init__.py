"""API routes."""

from fastapi import APIRouter, Depends

from lookbook.api.read_events import log_read_event
from lookbook.api.routes import (
    admin_analytics,
    admin_moodboards,
    admin_products,
    auth,
    dashboard_charts,
    moodboards,
    products,
    redirect,
    retailers,
    tracking,
)

api_router = APIRouter()

# Public routes (no auth required)
api_router.include_router(tracking.router, prefix="/api/analytics", tags=["analytics-ingestion"])
api_router.include_router(
    products.router,
    prefix="/products",
    tags=["products"],
    dependencies=[Depends(log_read_event)],
)
api_router.include_router(
    moodboards.router,
    prefix="/moodboards",
    tags=["moodboards"],
    dependencies=[Depends(log_read_event)],
)
api_router.include_router(
    redirect.router,
    prefix="/go",
    tags=["redirect"],
    dependencies=[Depends(log_read_event)],
)
api_router.include_router(auth.router, prefix="/admin/auth", tags=["auth"])

# Protected routes (admin bearer token required)
api_router.include_router(admin_analytics.router, prefix="/admin/analytics", tags=["admin-analytics"])
api_router.include_router(dashboard_charts.router, prefix="/api/analytics", tags=["admin-analytics"])
api_router.include_router(retailers.router, prefix="/admin/retailers", tags=["retailers"])
api_router.include_router(admin_products.router, prefix="/admin/products", tags=["admin-products"])
api_router.include_router(admin_moodboards.router, prefix="/admin/moodboards", tags=["admin-moodboards"])
