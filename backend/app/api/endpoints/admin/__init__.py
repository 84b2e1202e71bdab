"""
Admin API endpoints. All require a staff token with no pending password change.
"""
from fastapi import APIRouter

from app.api.endpoints.admin import export

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(export.router, prefix="/export", tags=["Admin Export"])
