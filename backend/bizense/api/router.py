from fastapi import APIRouter

from bizense.api import dashboard, health, products, profile, reports, upload

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router, prefix="")
api_router.include_router(profile.router, prefix="")
api_router.include_router(dashboard.router, prefix="")
api_router.include_router(reports.router, prefix="")
api_router.include_router(products.router, prefix="")
api_router.include_router(upload.router, prefix="")
