from fastapi import APIRouter
from hazardscan.api.v1 import inspections, uploads, users, admin_settings

api_router = APIRouter()

api_router.include_router(inspections.router, prefix="/inspections", tags=["inspections"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(admin_settings.router, prefix="/admin/settings", tags=["settings"])
