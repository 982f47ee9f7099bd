from fastapi import APIRouter

from .routes import designs, health, previews

api_router = APIRouter()

# Health check
api_router.include_router(health.router, tags=["health"])

# Business-scoped resources
api_router.include_router(designs.router, prefix="/designs", tags=["designs"])

# Rendering previews for the design editor
api_router.include_router(previews.router, prefix="/previews", tags=["previews"])
