"""
GST API Routes Module.

All routes are prefixed with /gst.

Sub-modules:
- slabs: Tax slab registry (CRUD, default resolution, status toggle, seeding)
- entries: Tax entries (CRUD, status changes, filtered listing, preview)
- reports: GSTR return generation and the dashboard summary
"""
from __future__ import annotations

from fastapi import APIRouter

from .entries import router as entries_router
from .reports import router as reports_router
from .slabs import router as slabs_router

# Main router with /gst prefix
router = APIRouter(prefix="/gst", tags=["gst"])

router.include_router(slabs_router)
router.include_router(entries_router)
router.include_router(reports_router)

__all__ = ["router"]
