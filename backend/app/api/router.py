from fastapi import APIRouter
from app.api.endpoints import auth, survey, health
from app.api.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(survey.router, tags=["Survey"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin_router)
