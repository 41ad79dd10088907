"""API route registration."""

from fastapi import APIRouter

from filedeck.api.routes import cache, dirs, files, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(dirs.router, prefix="/dirs", tags=["dirs"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
