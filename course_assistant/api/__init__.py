"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import courses_router, health_router

api_router = APIRouter()

# Versioned routers; the chat route keeps its unversioned /api/chat path
api_router.include_router(health_router)
api_router.include_router(courses_router)

__all__ = ["api_router"]
