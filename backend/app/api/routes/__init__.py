from fastapi import APIRouter

from app.api.routes import billing, export, folders, health, profile, prompts

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(profile.router, tags=["profile"])
api_router.include_router(prompts.router, prefix="/prompts", tags=["prompts"])
api_router.include_router(folders.router, prefix="/folders", tags=["folders"])
api_router.include_router(export.router, tags=["export"])
api_router.include_router(billing.router, tags=["billing"])
